# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

Weather payload types mirror the Open-Meteo forecast response. Only the
fields the dashboard reads are declared; anything else the API returns is
kept as extra data so cached payloads round-trip unchanged.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# === LOCATION ===


class Location(BaseModel):
    """Geographic point a caller wants weather for."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    name: str | None = None
    id: str | None = None

    @property
    def label(self) -> str:
        """Display label: the name when known, coordinates otherwise."""
        if self.name:
            return self.name
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


# === WEATHER PAYLOAD ===


class DailyWeatherData(BaseModel):
    """Daily forecast arrays, one value per entry in ``time``."""

    model_config = ConfigDict(extra="allow")

    time: list[str]
    temperature_2m_max: list[float | None] | None = None
    temperature_2m_min: list[float | None] | None = None
    wind_speed_10m_max: list[float | None] | None = None
    precipitation_sum: list[float | None] | None = None
    rain_sum: list[float | None] | None = None
    et0_fao_evapotranspiration: list[float | None] | None = None
    et0_fao_evapotranspiration_sum: list[float | None] | None = None


class HourlyWeatherData(BaseModel):
    """Hourly forecast arrays, one value per entry in ``time``."""

    model_config = ConfigDict(extra="allow")

    time: list[str]
    temperature_2m: list[float | None] | None = None
    relative_humidity_2m: list[float | None] | None = None
    wind_speed_10m: list[float | None] | None = None
    precipitation: list[float | None] | None = None
    et0_fao_evapotranspiration: list[float | None] | None = None


class WeatherResponse(BaseModel):
    """Parsed Open-Meteo forecast response."""

    model_config = ConfigDict(extra="allow")

    latitude: float
    longitude: float
    generationtime_ms: float | None = None
    utc_offset_seconds: int = 0
    timezone: str = "GMT"
    timezone_abbreviation: str | None = None
    elevation: float | None = None
    daily_units: dict[str, str] = Field(default_factory=dict)
    daily: DailyWeatherData | None = None
    hourly_units: dict[str, str] = Field(default_factory=dict)
    hourly: HourlyWeatherData | None = None


# === MULTI-LOCATION REFRESH ===


class LocationWeatherResult(BaseModel):
    """Outcome of refreshing one location in a batch."""

    location: Location
    weather: WeatherResponse | None = None
    error: str | None = None
    rate_limited: bool = False
    last_updated: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.weather is not None
