"""Stores holding the board's shared state."""
from msgboard.services.messages import MessageStore, MAX_MESSAGES
from msgboard.services.settings import RuntimeSettings, SettingsGateway

__all__ = [
    "MessageStore",
    "MAX_MESSAGES",
    "RuntimeSettings",
    "SettingsGateway",
]
