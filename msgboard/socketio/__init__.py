"""
Message board Socket.IO module.

Provides the real-time channel: server factory, the board namespace,
admin authentication and per-identity rate limiting.
"""

from msgboard.socketio.server import create_server

__all__ = ['create_server']
