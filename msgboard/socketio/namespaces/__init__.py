"""
Socket.IO namespaces for the message board.
"""
from .main import BoardNamespace

__all__ = [
    'BoardNamespace',
]
