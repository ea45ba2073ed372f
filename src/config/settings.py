# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for the weather client: upstream endpoint, forecast
parameters, request pacing, retry policy, cache and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Upstream weather API ===
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_request_timeout_s: float = 10.0

    # === Forecast parameters ===
    forecast_daily_variables: str = (
        "temperature_2m_max,temperature_2m_min,wind_speed_10m_max,"
        "precipitation_sum,rain_sum,et0_fao_evapotranspiration,"
        "et0_fao_evapotranspiration_sum"
    )
    forecast_hourly_variables: str = (
        "temperature_2m,relative_humidity_2m,wind_speed_10m,"
        "precipitation,et0_fao_evapotranspiration"
    )
    forecast_days: int = 14
    forecast_model: str = "gfs_seamless"
    forecast_timezone: str = "America/Los_Angeles"
    temperature_unit: Literal["celsius", "fahrenheit"] = "fahrenheit"
    wind_speed_unit: Literal["kmh", "ms", "mph", "kn"] = "mph"
    precipitation_unit: Literal["mm", "inch"] = "inch"

    # === Request pacing and retry ===
    min_spacing_s: float = 1.0
    max_retries: int = 3
    base_delay_s: float = 2.0

    # === Cache ===
    cache_ttl_s: float = 1800.0
    cache_version: str = "2.1"
    cache_backend: Literal["json", "sqlite", "redis"] = "json"
    cache_root: Path = Path("~/.etweather/cache")
    cache_redis_url: str = ""
    cache_storage_key: str = "weather_cache"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("min_spacing_s", "base_delay_s", "weather_request_timeout_s")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("timing settings must be >= 0")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """Retries stay small: rate limiting is expected, not exceptional."""
        if not 0 <= v <= 10:
            raise ValueError("max_retries must be between 0 and 10")
        return v

    @field_validator("forecast_days")
    @classmethod
    def validate_forecast_days(cls, v: int) -> int:
        if not 1 <= v <= 16:
            raise ValueError("forecast_days must be between 1 and 16")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if not self.cache_version.strip():
            errors.append("CACHE_VERSION must not be empty")

        if self.cache_ttl_s <= 0:
            errors.append("CACHE_TTL_S must be > 0")

        if not self.cache_storage_key.strip():
            errors.append("CACHE_STORAGE_KEY must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def forecast_daily_list(self) -> list[str]:
        """Parse comma-separated daily forecast variables."""
        return [v.strip() for v in self.forecast_daily_variables.split(",") if v.strip()]

    @property
    def forecast_hourly_list(self) -> list[str]:
        """Parse comma-separated hourly forecast variables."""
        return [v.strip() for v in self.forecast_hourly_variables.split(",") if v.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-call config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
