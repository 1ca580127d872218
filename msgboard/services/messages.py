"""
In-memory message history.

Holds the most recent public messages (newest first). Records are handed
out as plain dict copies so callers can never mutate the stored history.
"""
import logging
from collections import deque
from typing import Iterable, List, Optional

from pydantic import ValidationError

from msgboard.schemas import Message

logger = logging.getLogger(__name__)

MAX_MESSAGES = 10
MIN_MESSAGE_LENGTH = 2


class MessageStore:
    """Bounded, ordered collection of message records."""

    def __init__(self, seed: Optional[Iterable[str]] = None, capacity: int = MAX_MESSAGES):
        self._messages: deque[Message] = deque(maxlen=capacity)
        for text in seed or []:
            self.add(text)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def capacity(self) -> int:
        return self._messages.maxlen

    def add(self, text: str, max_length: Optional[int] = None) -> Optional[Message]:
        """
        Store a new message.

        Text is trimmed first; anything shorter than two characters is
        rejected. Longer texts are truncated to ``max_length`` rather than
        rejected. When the store is full the oldest record is evicted.

        Returns:
            The stored Message, or None if the text was rejected.
        """
        if not isinstance(text, str):
            return None

        message = Message.create(text)
        if len(message.text) < MIN_MESSAGE_LENGTH:
            return None

        if max_length is not None:
            message = message.with_max_length(max_length)

        self._messages.appendleft(message)
        return message

    def list(self) -> List[dict]:
        """Return copies of all records, most recent first."""
        return [message.to_dict() for message in self._messages]

    def get(self, message_id: str) -> Optional[dict]:
        for message in self._messages:
            if message.id == message_id:
                return message.to_dict()
        return None

    def edit(self, record: dict) -> bool:
        """
        Replace the record with the same id wholesale.

        Returns:
            True if a record was replaced, False if the id is unknown or the
            record is malformed.
        """
        try:
            replacement = Message.model_validate(record)
        except ValidationError as e:
            logger.debug(f"Rejected malformed message edit: {e}")
            return False

        for index, message in enumerate(self._messages):
            if message.id == replacement.id:
                # Keep the original timestamp unless the record carries one
                if 'created_at' not in replacement.model_fields_set:
                    replacement = replacement.model_copy(update={'created_at': message.created_at})
                self._messages[index] = replacement
                return True
        return False

    def delete(self, message_id: str) -> List[dict]:
        """Remove the record with ``message_id`` (if any) and return what remains."""
        remaining = [message for message in self._messages if message.id != message_id]
        if len(remaining) != len(self._messages):
            self._messages = deque(remaining, maxlen=self._messages.maxlen)
        return self.list()
