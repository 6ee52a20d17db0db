"""Time-bounded in-process cache for resolved identifiers."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger("watchlist_bridge.services.resolution_cache")

V = TypeVar("V")
Clock = Callable[[], float]


@dataclass(slots=True)
class _Entry(Generic[V]):
    value: V
    expires_at: float


@dataclass(slots=True)
class CacheStats:
    keys: int
    hits: int
    misses: int


class TTLCache(Generic[V]):
    """Key/value store whose entries expire a fixed time after being written.

    Reads never extend an entry's lifetime. Expired entries are dropped lazily
    on read, by ``purge_expired`` (driven by ``run_sweeper``), or by ``flush``.
    """

    def __init__(self, ttl_seconds: float, *, clock: Clock | None = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, _Entry[V]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            entry = None
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def set(self, key: str, value: V) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def flush(self) -> None:
        """Remove every entry and reset hit/miss counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info("Resolution cache cleared")

    def stats(self) -> CacheStats:
        return CacheStats(keys=len(self._entries), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        return len(self._entries)

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Purge expired entries every ``interval_seconds`` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.purge_expired()
            if removed:
                logger.info("Evicted %d expired resolution cache entries", removed)
