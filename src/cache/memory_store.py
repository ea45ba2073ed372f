# src/cache/memory_store.py — v1
"""In-memory weather cache with lazy TTL expiry.

Entries are never evicted on a timer: an expired entry stays in the map but
is reported as a miss until a fresh fetch overwrites it. The store has no
lock; it is only mutated from the event loop that owns the WeatherClient.
"""

from __future__ import annotations

import logging

from etweather.cache.models import CacheEntry, CacheSnapshot
from etweather.core.clock import Clock, SystemClock
from etweather.core.models import WeatherResponse

logger = logging.getLogger(__name__)


class WeatherCache:
    """Keyed map from location key to (payload, fetched_at)."""

    def __init__(self, ttl_s: float, clock: Clock | None = None) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be > 0")
        self._ttl_s = ttl_s
        self._clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` if present and unexpired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock.now(), self._ttl_s):
            logger.debug("Cache entry %s expired", key)
            return None
        return entry

    def put(
        self, key: str, payload: WeatherResponse, now: float | None = None
    ) -> CacheEntry:
        """Overwrite the entry for ``key`` with a fresh timestamp."""
        entry = CacheEntry(
            payload=payload,
            fetched_at=self._clock.now() if now is None else now,
        )
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def snapshot(self, version: str) -> CacheSnapshot:
        """Build a serializable snapshot of the fresh entries."""
        now = self._clock.now()
        return CacheSnapshot(
            version=version,
            entries={
                key: entry
                for key, entry in self._entries.items()
                if entry.is_fresh(now, self._ttl_s)
            },
        )

    def restore(self, snapshot: CacheSnapshot) -> int:
        """Replace the current contents with ``snapshot`` entries.

        Returns:
            Number of entries loaded.
        """
        self._entries = dict(snapshot.entries)
        return len(self._entries)

    def __len__(self) -> int:
        now = self._clock.now()
        return sum(1 for e in self._entries.values() if e.is_fresh(now, self._ttl_s))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
