"""
Runtime settings that admins can change while the board is running.

Values start from the environment configuration (``msgboard.core.config``)
and are updated through ``SettingsGateway.write``. Every accepted change is
announced on the event dispatcher, first as a generic ``settings change``
event and then once per changed field (``settings change:<field>``).
"""
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from msgboard.core.config import Settings
from msgboard.core.events import BoardEvent, EventDispatcher

logger = logging.getLogger(__name__)

REDACTED_FIELDS = ('secret',)


class RuntimeSettings(BaseModel):
    """Typed snapshot of the runtime settings (wire names are camelCase)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    messages_per_interval: int = Field(5, alias="messagesPerInterval", ge=0)
    messages_interval_length: float = Field(60.0, alias="messagesIntervalLength", gt=0)
    max_message_length: int = Field(280, alias="maxMessageLength", ge=2)
    secret: str = Field("", alias="secret")

    @classmethod
    def from_config(cls, config: Settings) -> "RuntimeSettings":
        return cls(
            messages_per_interval=config.messages_per_interval,
            messages_interval_length=config.messages_interval_length,
            max_message_length=config.max_message_length,
            secret=config.secret,
        )


# Wire name -> attribute name, in field enumeration order
FIELD_ALIASES = {
    field.alias or name: name for name, field in RuntimeSettings.model_fields.items()
}


class SettingsGateway:
    """Typed read/write access to the runtime settings."""

    def __init__(self, initial: Optional[RuntimeSettings] = None, dispatcher: Optional[EventDispatcher] = None):
        self._settings = initial if initial is not None else RuntimeSettings()
        self.dispatcher = dispatcher if dispatcher is not None else EventDispatcher()

    @property
    def secret(self) -> str:
        return self._settings.secret

    @property
    def messages_per_interval(self) -> int:
        return self._settings.messages_per_interval

    @property
    def messages_interval_length(self) -> float:
        return self._settings.messages_interval_length

    @property
    def max_message_length(self) -> int:
        return self._settings.max_message_length

    def snapshot(self) -> RuntimeSettings:
        """Unredacted settings. Internal use only."""
        return self._settings

    def read(self) -> dict:
        """Settings as sent to clients, with secrets redacted."""
        data = self._settings.model_dump(by_alias=True)
        for key in REDACTED_FIELDS:
            data[key] = None
        return data

    def get(self, key: str) -> Any:
        """Read one setting by wire name."""
        return getattr(self._settings, FIELD_ALIASES[key])

    def set(self, key: str, value: Any) -> bool:
        return self.write({key: value})

    def write(self, partial: dict) -> bool:
        """
        Apply a partial update.

        Unknown keys and values that cannot be coerced to the declared type
        are dropped. If nothing differs from the current values this is a
        no-op.

        Returns:
            True if at least one setting changed, False otherwise.
        """
        if not isinstance(partial, dict):
            return False

        changes = {}
        for key, name in FIELD_ALIASES.items():
            if key not in partial:
                continue
            try:
                value = self._coerce(name, partial[key])
            except ValidationError as e:
                logger.warning(f"Ignoring invalid value for setting '{key}': {e.errors()[0]['msg']}")
                continue
            if value != getattr(self._settings, name):
                changes[name] = value

        if not changes:
            return False

        self._settings = self._settings.model_copy(update=changes)
        logger.info(f"Runtime settings changed: {', '.join(sorted(changes))}")

        self.dispatcher.emit(BoardEvent.SETTINGS_CHANGE, self._settings)
        for key, name in FIELD_ALIASES.items():
            if name in changes:
                self.dispatcher.emit(BoardEvent.SETTINGS_CHANGE, changes[name], field=key)

        return True

    def _coerce(self, name: str, value: Any) -> Any:
        """Validate ``value`` against the declared type and constraints of ``name``."""
        candidate = RuntimeSettings.model_validate({**self._settings.model_dump(), name: value})
        return getattr(candidate, name)
