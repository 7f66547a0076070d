"""In-memory deduplication of error reports by message."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

DEFAULT_MAX_ENTRIES = 10_000


class ErrorTracker:
    """Remembers when each error message was last reported successfully.

    Timestamps are whole seconds from *clock*.  A message is a duplicate
    while its last successful report is at most ``max_age_seconds`` old.
    Checking never counts as seeing a message; only ``record`` does, and
    the client calls it after a confirmed delivery.

    Memory is bounded: expired entries are dropped when a new message is
    recorded, and beyond *max_entries* the least recently recorded
    messages are evicted.

    Every method takes an internal lock, so one tracker can be shared by
    concurrent reports.  The lock is never held while delivering.
    """

    def __init__(
        self,
        max_age_seconds: float,
        *,
        clock: Callable[[], float] = time.time,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be a positive number")
        if max_entries <= 0:
            raise ValueError("max_entries must be a positive number")
        self._max_age = max_age_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_age_seconds(self) -> float:
        return self._max_age

    @max_age_seconds.setter
    def max_age_seconds(self, value: float) -> None:
        if value <= 0:
            raise ValueError("max_age_seconds must be a positive number")
        with self._lock:
            self._max_age = value

    def is_duplicate(self, message: str, *, max_age_seconds: float | None = None) -> bool:
        """Return True if *message* was recorded within the max age.

        *max_age_seconds* overrides the tracker default for this check.
        """
        now = self._now()
        with self._lock:
            max_age = self._max_age if max_age_seconds is None else max_age_seconds
            timestamp = self._entries.get(message)
        if timestamp is None:
            return False
        return _is_fresh(timestamp, now, max_age)

    def record(self, message: str, *, max_age_seconds: float | None = None) -> None:
        """Mark *message* as reported now.

        Expired entries are evicted using *max_age_seconds* when given, so a
        caller checking against its own window records against it too.
        """
        now = self._now()
        with self._lock:
            max_age = self._max_age if max_age_seconds is None else max_age_seconds
            self._entries.pop(message, None)
            self._entries[message] = now
            self._evict(now, max_age)

    def prune(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._now()
        with self._lock:
            expired = [
                message
                for message, timestamp in self._entries.items()
                if not _is_fresh(timestamp, now, self._max_age)
            ]
            for message in expired:
                del self._entries[message]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, message: object) -> bool:
        with self._lock:
            return message in self._entries

    def _now(self) -> int:
        return int(self._clock())

    def _evict(self, now: int, max_age: float) -> None:
        # Entries are kept in record order, oldest first.
        while self._entries:
            oldest, timestamp = next(iter(self._entries.items()))
            if _is_fresh(timestamp, now, max_age):
                break
            del self._entries[oldest]
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)


def _is_fresh(timestamp: int, now: int, max_age: float) -> bool:
    # A timestamp ahead of the clock (skew) gives a negative age: still fresh.
    return now - timestamp <= max_age
