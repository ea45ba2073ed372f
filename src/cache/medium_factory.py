# src/cache/medium_factory.py — v1
"""Factory for durable medium instantiation."""

from __future__ import annotations

from etweather.cache.base_medium import BaseDurableMedium
from etweather.config.settings import Settings


def create_medium(settings: Settings | None = None) -> BaseDurableMedium:
    """Instantiate the configured durable medium.

    Args:
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        Configured BaseDurableMedium implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = "~/.etweather/cache" if settings is None else str(settings.cache_root)

    if backend == "json":
        from etweather.cache.json_medium import JsonFileMedium
        return JsonFileMedium(cache_root=cache_root)

    if backend == "sqlite":
        from etweather.cache.sqlite_medium import SqliteMedium
        return SqliteMedium(db_path=f"{cache_root}/etweather_cache.db")

    if backend == "redis":
        from etweather.cache.redis_medium import RedisMedium
        if settings is None or not settings.cache_redis_url:
            raise ValueError("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")
        return RedisMedium(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
