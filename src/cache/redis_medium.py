# src/cache/redis_medium.py — v2
"""Redis medium (CACHE_BACKEND=redis).

Suitable when several dashboard processes should share one warm cache.
"""

from __future__ import annotations

import logging

import redis

from etweather.cache.base_medium import BaseDurableMedium

logger = logging.getLogger(__name__)

_KEY_PREFIX = "etweather:"


class RedisMedium(BaseDurableMedium):
    """Redis-backed key/value medium."""

    def __init__(self, redis_url: str, key_prefix: str = _KEY_PREFIX) -> None:
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = key_prefix

    async def get(self, key: str) -> str | None:
        return self._client.get(f"{self._prefix}{key}")

    async def set(self, key: str, value: str) -> None:
        self._client.set(f"{self._prefix}{key}", value)

    async def delete(self, key: str) -> None:
        self._client.delete(f"{self._prefix}{key}")

    def close(self) -> None:
        """Close the Redis connection pool."""
        self._client.close()

    @property
    def backend_name(self) -> str:
        return "redis"
