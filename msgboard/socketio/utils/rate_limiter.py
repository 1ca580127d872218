"""
Rate limiter for Socket.IO message submissions.

Fixed-window counting per client identity: each identity may submit
``per_interval`` messages per ``interval_length`` seconds. The full quota
becomes available again once the window has elapsed.

Windows are reset eagerly: every lookup first checks whether the entry's
window has expired and, if so, starts a fresh one. ``can`` is therefore
always evaluated against the current window.

Entries are never evicted, so the table grows with the number of distinct
identities seen during the process lifetime.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional


DEFAULT_PER_INTERVAL = 5
DEFAULT_INTERVAL_LENGTH = 60.0  # seconds


@dataclass
class RateLimitEntry:
    """Rate limiting state for one identity."""

    identity: str
    window_start: float
    count: int = 0
    can: bool = True
    limit: int = DEFAULT_PER_INTERVAL
    reset_at: float = 0.0

    def to_dict(self, now: Optional[float] = None) -> dict:
        """Convert to dictionary for the ``meta`` event."""
        now = time.time() if now is None else now
        return {
            'identity': self.identity,
            'windowStart': self.window_start,
            'count': self.count,
            'limit': self.limit,
            'remaining': max(0, self.limit - self.count),
            'resetIn': round(max(0.0, self.reset_at - now), 3),
            'can': self.can,
        }


class RateLimiter:
    """Per-identity fixed-window rate limiter."""

    def __init__(
        self,
        interval_length: float = DEFAULT_INTERVAL_LENGTH,
        per_interval: int = DEFAULT_PER_INTERVAL,
        clock: Callable[[], float] = time.time,
        entries: Optional[dict[str, RateLimitEntry]] = None,
    ):
        """
        Initialize the rate limiter.

        Args:
            interval_length: Window length in seconds.
            per_interval: Number of messages allowed per window.
            clock: Time source returning epoch seconds.
            entries: Existing entry table to carry over (used when
                     reconfiguring).
        """
        self.interval_length = float(interval_length)
        self.per_interval = int(per_interval)
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = entries if entries is not None else {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: str) -> bool:
        return identity in self._entries

    def now(self) -> float:
        return self._clock()

    def get_or_create(self, identity: str) -> RateLimitEntry:
        """
        Get the entry for an identity, creating a fresh one if needed.

        Does not consume quota.
        """
        entry = self._entries.get(identity)
        if entry is None:
            entry = RateLimitEntry(identity=identity, window_start=self.now())
            self._entries[identity] = entry
        return self._refresh(entry)

    def get(self, identity: str) -> Optional[RateLimitEntry]:
        """Get the entry for an identity without creating one."""
        entry = self._entries.get(identity)
        if entry is None:
            return None
        return self._refresh(entry)

    def update(self, entry: RateLimitEntry) -> RateLimitEntry:
        """
        Record one consumed attempt for ``entry``.

        Increments the count inside the current window, or opens a new
        window with a count of 1 if the previous one expired.
        """
        entry = self._refresh(entry)
        entry.count += 1
        return self._evaluate(entry)

    def update_per_timeframe(self, per_interval: int) -> "RateLimiter":
        """Return a limiter with a new quota that keeps every existing entry."""
        return RateLimiter(self.interval_length, per_interval, clock=self._clock, entries=self._entries)

    def update_interval_length(self, interval_length: float) -> "RateLimiter":
        """Return a limiter with a new window length that keeps every existing entry."""
        return RateLimiter(interval_length, self.per_interval, clock=self._clock, entries=self._entries)

    def status(self, identity: str) -> dict:
        """Wire form of the entry for ``identity`` (created if absent)."""
        return self.get_or_create(identity).to_dict(self.now())

    def reset(self, identity: Optional[str] = None):
        """
        Reset rate limiting state.

        Args:
            identity: Optional identity to reset. If None, resets all identities.
        """
        if identity is None:
            self._entries.clear()
        elif identity in self._entries:
            del self._entries[identity]

    def _refresh(self, entry: RateLimitEntry) -> RateLimitEntry:
        """Start a new window if the entry's window has expired."""
        now = self.now()
        if now - entry.window_start >= self.interval_length:
            entry.window_start = now
            entry.count = 0
        return self._evaluate(entry)

    def _evaluate(self, entry: RateLimitEntry) -> RateLimitEntry:
        entry.limit = self.per_interval
        entry.reset_at = entry.window_start + self.interval_length
        entry.can = entry.count < self.per_interval
        return entry
