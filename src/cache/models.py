# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheSnapshot."""

from __future__ import annotations

from pydantic import BaseModel, Field

from etweather.core.models import WeatherResponse


class CacheEntry(BaseModel):
    """Cached forecast for one location key."""

    payload: WeatherResponse
    fetched_at: float

    def is_fresh(self, now: float, ttl_s: float) -> bool:
        """True while ``now - fetched_at < ttl_s``."""
        return now - self.fetched_at < ttl_s


class CacheSnapshot(BaseModel):
    """Versioned, serializable image of the whole cache."""

    version: str
    entries: dict[str, CacheEntry] = Field(default_factory=dict)
