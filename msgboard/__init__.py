"""Real-time message board served over Socket.IO."""

__version__ = "1.0.0"
