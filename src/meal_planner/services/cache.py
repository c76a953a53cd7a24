"""Time-bounded cache used in front of the food databases."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for provider responses."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def put(self, key: str, value: object) -> None:
        """Store a value, replacing any previous entry."""

    def clear(self) -> None:
        """Drop every entry."""

    def size(self) -> int:
        """Return the number of stored entries."""


@dataclass
class _CacheEntry:
    value: object
    stored_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TtlCache(Cache):
    """In-memory cache whose entries expire a fixed time after insertion."""

    ttl_seconds: int
    clock: Callable[[], datetime] = _utc_now
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, repr=False)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= timedelta(seconds=self.ttl_seconds):
            self._entries.pop(key, None)
            return None
        return entry.value

    def put(self, key: str, value: object) -> None:
        """Store a value stamped with the current time."""
        self._entries[key] = _CacheEntry(value=value, stored_at=self.clock())

    def clear(self) -> None:
        """Drop every entry immediately."""
        self._entries.clear()

    def size(self) -> int:
        """Return the number of stored entries, expired ones included."""
        return len(self._entries)


def cache_key(provider: str, kind: str, value: str) -> str:
    """Build a provider-prefixed key from a lower-cased, trimmed value."""
    return f"{provider}:{kind}:{value.strip().lower()}"
