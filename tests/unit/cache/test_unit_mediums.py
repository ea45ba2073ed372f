# tests/unit/cache/test_mediums.py — v2
"""Tests for the durable mediums: JSON files, SQLite, Redis (mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from etweather.cache.json_medium import JsonFileMedium
from etweather.cache.sqlite_medium import SqliteMedium


class TestJsonFileMedium:
    @pytest.mark.asyncio
    async def test_set_and_get(self, tmp_path):
        medium = JsonFileMedium(tmp_path)
        await medium.set("weather_cache", '{"version": "1"}')
        assert await medium.get("weather_cache") == '{"version": "1"}'
        assert (tmp_path / "weather_cache.json").exists()

    @pytest.mark.asyncio
    async def test_get_missing(self, tmp_path):
        assert await JsonFileMedium(tmp_path).get("nope") is None

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_file(self, tmp_path):
        medium = JsonFileMedium(tmp_path)
        await medium.set("k", "one")
        await medium.set("k", "two")
        assert await medium.get("k") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        medium = JsonFileMedium(tmp_path)
        await medium.set("k", "v")
        await medium.delete("k")
        await medium.delete("k")
        assert await medium.get("k") is None

    @pytest.mark.asyncio
    async def test_key_sanitized(self, tmp_path):
        medium = JsonFileMedium(tmp_path)
        await medium.set("a/b", "v")
        assert (tmp_path / "a_b.json").exists()

    def test_creates_root(self, tmp_path):
        JsonFileMedium(tmp_path / "deep" / "cache")
        assert (tmp_path / "deep" / "cache").is_dir()

    def test_backend_name(self, tmp_path):
        assert JsonFileMedium(tmp_path).backend_name == "json"


class TestSqliteMedium:
    @pytest.fixture
    def medium(self, tmp_path):
        m = SqliteMedium(tmp_path / "cache.db")
        yield m
        m.close()

    @pytest.mark.asyncio
    async def test_set_and_get(self, medium):
        await medium.set("k", "v")
        assert await medium.get("k") == "v"

    @pytest.mark.asyncio
    async def test_upsert(self, medium):
        await medium.set("k", "v1")
        await medium.set("k", "v2")
        assert await medium.get("k") == "v2"

    @pytest.mark.asyncio
    async def test_get_missing(self, medium):
        assert await medium.get("missing") is None

    @pytest.mark.asyncio
    async def test_delete(self, medium):
        await medium.set("k", "v")
        await medium.delete("k")
        assert await medium.get("k") is None

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        first = SqliteMedium(tmp_path / "cache.db")
        await first.set("k", "persisted")
        first.close()
        second = SqliteMedium(tmp_path / "cache.db")
        try:
            assert await second.get("k") == "persisted"
        finally:
            second.close()

    def test_backend_name(self, medium):
        assert medium.backend_name == "sqlite"


class TestRedisMedium:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        with patch("redis.Redis.from_url", return_value=client) as from_url:
            from etweather.cache.redis_medium import RedisMedium

            medium = RedisMedium("redis://localhost:6379/0")
            from_url.assert_called_once_with(
                "redis://localhost:6379/0", decode_responses=True
            )
            yield medium, client

    @pytest.mark.asyncio
    async def test_get_prefixes_key(self, client):
        medium, mock = client
        mock.get.return_value = "payload"
        assert await medium.get("weather_cache") == "payload"
        mock.get.assert_called_once_with("etweather:weather_cache")

    @pytest.mark.asyncio
    async def test_set(self, client):
        medium, mock = client
        await medium.set("weather_cache", "payload")
        mock.set.assert_called_once_with("etweather:weather_cache", "payload")

    @pytest.mark.asyncio
    async def test_delete(self, client):
        medium, mock = client
        await medium.delete("weather_cache")
        mock.delete.assert_called_once_with("etweather:weather_cache")

    @pytest.mark.asyncio
    async def test_get_missing(self, client):
        medium, mock = client
        mock.get.return_value = None
        assert await medium.get("weather_cache") is None

    def test_backend_name(self, client):
        medium, _ = client
        assert medium.backend_name == "redis"

    def test_close_releases_pool(self, client):
        medium, mock = client
        medium.close()
        mock.close.assert_called_once_with()


class TestDefaultClose:
    def test_json_medium_close_is_noop(self, tmp_path):
        medium = JsonFileMedium(tmp_path)
        medium.close()
        assert medium.backend_name == "json"
