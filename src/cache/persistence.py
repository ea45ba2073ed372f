# src/cache/persistence.py — v1
"""Durable cache persistence with version-tagged snapshots.

The whole cache is written as a single JSON document under one storage key.
Nothing in this module raises to its caller: the cache only makes the client
faster, so a broken medium degrades to re-fetching and never to a crash.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from etweather.cache.base_medium import BaseDurableMedium
from etweather.cache.memory_store import WeatherCache
from etweather.cache.models import CacheSnapshot
from etweather.weather.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "weather_cache"


class CachePersistence:
    """Snapshot a WeatherCache to a durable medium and load it back."""

    def __init__(
        self,
        medium: BaseDurableMedium,
        version: str,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._medium = medium
        self._version = version
        self._storage_key = storage_key

    @property
    def version(self) -> str:
        return self._version

    @property
    def medium(self) -> BaseDurableMedium:
        return self._medium

    async def save(self, cache: WeatherCache) -> bool:
        """Write the cache snapshot.

        Returns:
            True when the write succeeded, False when it failed and was logged.
        """
        try:
            snapshot = cache.snapshot(self._version)
            await self._medium.set(self._storage_key, snapshot.model_dump_json())
        except Exception as e:
            self._report(PersistenceError("save", e))
            return False
        logger.debug(
            "Persisted %d cache entries (version %s) to %s",
            len(snapshot.entries), self._version, self._medium.backend_name,
        )
        return True

    async def load(self) -> CacheSnapshot | None:
        """Read the stored snapshot.

        Returns None when nothing is stored, when the medium cannot be read,
        when the data is corrupt, or when it was written under another cache
        version. The last two cases also clear the medium.
        """
        try:
            raw = await self._medium.get(self._storage_key)
        except Exception as e:
            self._report(PersistenceError("load", e))
            return None

        if raw is None:
            return None

        try:
            snapshot = CacheSnapshot.model_validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning("Discarding unreadable cache snapshot: %s", e)
            await self.clear()
            return None

        if snapshot.version != self._version:
            logger.info(
                "Cache version changed (%s -> %s), discarding %d persisted entries",
                snapshot.version, self._version, len(snapshot.entries),
            )
            await self.clear()
            return None

        return snapshot

    async def clear(self) -> bool:
        """Remove the stored snapshot."""
        try:
            await self._medium.delete(self._storage_key)
        except Exception as e:
            self._report(PersistenceError("clear", e))
            return False
        return True

    def _report(self, error: PersistenceError) -> None:
        logger.warning("%s", error)
