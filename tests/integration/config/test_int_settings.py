# tests/integration/config/test_int_settings.py — v2
"""Integration tests for configuration loading.

Tests Settings with real .env files, environment overrides, validation rules
and the components built from them. No external services required.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from etweather.cache.json_medium import JsonFileMedium
from etweather.cache.sqlite_medium import SqliteMedium
from etweather.config.settings import ConfigurationError, Settings
from etweather.weather.client import WeatherClient


class TestSettingsLoading:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.cache_backend == "json"
        assert settings.cache_ttl_s == 1800.0
        assert settings.cache_version == "2.1"
        assert settings.min_spacing_s == 1.0
        assert settings.max_retries == 3

    def test_from_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "CACHE_BACKEND=sqlite\n"
            f"CACHE_ROOT={tmp_path / 'store'}\n"
            "CACHE_TTL_S=600\n"
            "CACHE_VERSION=3.0\n"
            "MIN_SPACING_S=2.5\n"
            "FORECAST_DAYS=7\n"
            "TEMPERATURE_UNIT=celsius\n"
            "LOG_FORMAT=text\n"
        )
        settings = Settings(_env_file=str(env_file))
        assert settings.cache_backend == "sqlite"
        assert settings.cache_root == tmp_path / "store"
        assert settings.cache_ttl_s == 600.0
        assert settings.cache_version == "3.0"
        assert settings.min_spacing_s == 2.5
        assert settings.forecast_days == 7
        assert settings.temperature_unit == "celsius"
        assert settings.log_format == "text"

    def test_environment_overrides_env_file(self, tmp_path: Path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("MAX_RETRIES=5\n")
        monkeypatch.setenv("MAX_RETRIES", "1")
        assert Settings(_env_file=str(env_file)).max_retries == 1

    def test_unknown_keys_ignored(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("SOME_OTHER_TOOL_SETTING=1\n")
        Settings(_env_file=str(env_file))

    def test_variable_lists(self):
        settings = Settings(
            _env_file=None,
            forecast_daily_variables=" temperature_2m_max , rain_sum,,",
            forecast_hourly_variables="",
        )
        assert settings.forecast_daily_list == ["temperature_2m_max", "rain_sum"]
        assert settings.forecast_hourly_list == []


class TestSettingsValidation:

    def test_redis_needs_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_errors_are_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, cache_version=" ", cache_ttl_s=0)
        assert "CACHE_VERSION" in str(exc_info.value)
        assert "CACHE_TTL_S" in str(exc_info.value)

    def test_invalid_backend_from_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_BACKEND=memcached\n")
        with pytest.raises(ValueError):
            Settings(_env_file=str(env_file))


class TestSettingsWiring:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("backend,medium_type", [
        ("json", JsonFileMedium),
        ("sqlite", SqliteMedium),
    ])
    async def test_client_uses_configured_medium(self, tmp_path: Path, backend, medium_type):
        settings = Settings(_env_file=None, cache_backend=backend, cache_root=tmp_path)
        client = WeatherClient(settings)
        try:
            assert isinstance(client._persistence.medium, medium_type)
            assert client._persistence.version == "2.1"
            assert client.cache.ttl_s == 1800.0
            assert client.scheduler.pending == 0
        finally:
            await client.aclose()
