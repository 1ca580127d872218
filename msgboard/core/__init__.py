"""Core package containing configuration and the internal event dispatcher."""
from msgboard.core.config import get_settings, Settings
from msgboard.core.events import BoardEvent, EventDispatcher

__all__ = [
    "get_settings",
    "Settings",
    "BoardEvent",
    "EventDispatcher",
]
