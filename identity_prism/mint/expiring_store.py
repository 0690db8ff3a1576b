"""
Expiring key-value store with an injected clock.

Every call takes `now` (Unix seconds) so expiry is deterministic in tests.
Entries are visible while now < stored_at + ttl.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    expires_at: float


class ExpiringStore(Generic[V]):
    def __init__(self, ttl_sec: float) -> None:
        if ttl_sec <= 0:
            raise ValueError("ttl_sec must be positive")
        self._ttl = ttl_sec
        self._entries: dict[str, _Entry[V]] = {}

    @property
    def ttl_sec(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, key: str, value: V, now: float) -> None:
        """Store value under key, replacing any previous entry and restarting its TTL."""
        self._entries[key] = _Entry(value=value, expires_at=now + self._ttl)

    def peek(self, key: str, now: float) -> V | None:
        entry = self._entries.get(key)
        if entry is None or now >= entry.expires_at:
            return None
        return entry.value

    def take(self, key: str, now: float) -> V | None:
        """Remove and return the value; None if missing or expired (expired entries are dropped too)."""
        entry = self._entries.pop(key, None)
        if entry is None or now >= entry.expires_at:
            return None
        return entry.value

    def prune(self, now: float) -> int:
        """Drop every expired entry; return how many were dropped."""
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)
