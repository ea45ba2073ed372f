# tests/unit/cache/test_medium_factory.py — v1
"""Tests for cache/medium_factory.py."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from etweather.cache.json_medium import JsonFileMedium
from etweather.cache.medium_factory import create_medium
from etweather.cache.sqlite_medium import SqliteMedium
from etweather.config.settings import Settings


class TestCreateMedium:
    def test_json_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="json", cache_root=tmp_path)
        assert isinstance(create_medium(s), JsonFileMedium)

    def test_sqlite_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_backend="sqlite", cache_root=tmp_path)
        medium = create_medium(s)
        try:
            assert isinstance(medium, SqliteMedium)
            assert (tmp_path / "etweather_cache.db").exists()
        finally:
            medium.close()

    def test_redis_backend(self):
        s = Settings(
            _env_file=None, cache_backend="redis", cache_redis_url="redis://cache:6379/1",
        )
        with patch("redis.Redis.from_url", return_value=MagicMock()) as from_url:
            medium = create_medium(s)
        assert medium.backend_name == "redis"
        from_url.assert_called_once_with("redis://cache:6379/1", decode_responses=True)

    def test_unsupported_backend(self, tmp_path):
        s = Settings(_env_file=None, cache_root=tmp_path)
        object.__setattr__(s, "cache_backend", "memcached")
        with pytest.raises(ValueError, match="Unsupported"):
            create_medium(s)
