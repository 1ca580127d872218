"""
In-process event dispatcher.

Lets stores announce changes (e.g. runtime settings updates) to listeners
such as the Socket.IO namespace, which reconfigures its rate limiter.
Listeners are keyed by event and an optional field name, and are called
synchronously in registration order.
"""
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class BoardEvent(str, Enum):
    """Internal events published by the board's stores."""

    SETTINGS_CHANGE = "settings change"

    def key(self, field: Optional[str] = None) -> str:
        """Textual name of the event, e.g. ``settings change:secret``."""
        if field is None:
            return self.value
        return f"{self.value}:{field}"


class EventDispatcher:
    """Multimap of listeners keyed by ``(event, field)``."""

    def __init__(self):
        self._listeners: dict[tuple[BoardEvent, Optional[str]], list[Listener]] = defaultdict(list)

    def on(self, event: BoardEvent, listener: Listener, field: Optional[str] = None):
        """Register ``listener`` for ``event`` (optionally scoped to one field)."""
        self._listeners[(event, field)].append(listener)

    def off(self, event: BoardEvent, listener: Listener, field: Optional[str] = None):
        """Remove a previously registered listener. Unknown listeners are ignored."""
        listeners = self._listeners.get((event, field), [])
        if listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: BoardEvent, field: Optional[str] = None) -> list[Listener]:
        return list(self._listeners.get((event, field), []))

    def emit(self, event: BoardEvent, *data, field: Optional[str] = None) -> int:
        """
        Call every listener registered for ``event``/``field``.

        A failing listener is logged and does not stop the fan-out.

        Returns:
            Number of listeners that were called.
        """
        listeners = self.listeners(event, field)
        for listener in listeners:
            try:
                listener(*data)
            except Exception:
                logger.exception(f"Listener {listener!r} failed for '{event.key(field)}'")
        return len(listeners)
