"""
Pydantic schemas for board messages and notifications.

Wire payloads use the camelCase aliases (``createdAt``), Python code uses
snake_case attributes.
"""
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _new_id() -> str:
    return uuid.uuid4().hex


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class Message(BaseModel):
    """A public message shown on the board."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f2a9c1e5b7d4e8f9a0b1c2d3e4f5a6b",
                "text": "Hello everyone",
                "createdAt": "2024-12-21T12:00:00Z",
            }
        }
    )

    id: str = Field(default_factory=_new_id, description="Unique message identifier")
    text: str = Field(..., description="Message body")
    created_at: str = Field(default_factory=_timestamp, alias="createdAt", description="ISO 8601 creation time")

    @classmethod
    def create(cls, text: str) -> "Message":
        """Build a new message from raw user input."""
        return cls(text=text.strip())

    def with_max_length(self, max_length: int) -> "Message":
        """Return a copy whose text is cut to ``max_length`` characters."""
        if max_length is None or max_length < 0 or len(self.text) <= max_length:
            return self
        return self.model_copy(update={'text': self.text[:max_length]})

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class Notification(BaseModel):
    """Ad-hoc notification pushed by an admin to every client."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    title: str = Field("", description="Optional heading")
    text: str = Field(..., description="Notification body")
    created_at: str = Field(default_factory=_timestamp, alias="createdAt")

    @field_validator('title', mode='before')
    @classmethod
    def _default_title(cls, value):
        return '' if value is None else value

    @field_validator('title', 'text')
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator('text')
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError('notification text must not be empty')
        return value

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class MessageListResponse(BaseModel):
    """Response containing the public message history."""
    messages: list[dict] = Field(default_factory=list, description="Messages, most recent first")
    count: int = Field(0, description="Number of messages in response")


class HealthResponse(BaseModel):
    """Liveness information."""
    status: str = Field(..., description="Overall status")
    messages: int = Field(0, description="Messages currently stored")
    connections: int = Field(0, description="Open Socket.IO connections")
    timestamp: str = Field(..., description="ISO 8601 timestamp of response")
