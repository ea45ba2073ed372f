# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a fake clock, an in-memory durable medium, a scripted upstream
fetcher and sample forecast payloads. No network or real timers: all I/O is
faked or kept under tmp_path.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from etweather.cache.base_medium import BaseDurableMedium
from etweather.config.settings import Settings
from etweather.core.models import Location, WeatherResponse

# 2023-11-14T22:13:20Z
T0 = 1_700_000_000.0


# === FAKES ===


class FakeClock:
    """Deterministic clock: sleeping advances time instantly."""

    def __init__(self, start: float = T0) -> None:
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def monotonic(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds > 0:
            self._now += seconds
        # Still yield so other tasks interleave as they would on a real loop.
        await asyncio.sleep(0)


class MemoryMedium(BaseDurableMedium):
    """Dict-backed medium with switchable failures."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0
        self.closed = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("medium unreadable")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.data[key] = value

    async def delete(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data.pop(key, None)

    def close(self) -> None:
        self.closed = True

    @property
    def backend_name(self) -> str:
        return "memory"


class FakeFetcher:
    """Upstream stand-in recording every call with its start time.

    ``outcomes`` is consumed one per call: an exception instance is raised,
    None means a normal response. Once exhausted, calls succeed.
    """

    def __init__(self, clock: FakeClock, latency_s: float = 0.0) -> None:
        self._clock = clock
        self.latency_s = latency_s
        self.outcomes: list[BaseException | None] = []
        self.calls: list[tuple[Location, float]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def start_times(self) -> list[float]:
        return [t for _, t in self.calls]

    async def fetch(self, location: Location) -> WeatherResponse:
        self.calls.append((location, self._clock.now()))
        if self.latency_s:
            await self._clock.sleep(self.latency_s)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if outcome is not None:
                raise outcome
        return make_weather(location.latitude, location.longitude)


def make_weather(latitude: float = 36.6777, longitude: float = -121.6555) -> WeatherResponse:
    """Minimal Open-Meteo style forecast for a location."""
    return WeatherResponse.model_validate(
        {
            "latitude": latitude,
            "longitude": longitude,
            "generationtime_ms": 0.42,
            "utc_offset_seconds": -28800,
            "timezone": "America/Los_Angeles",
            "timezone_abbreviation": "PST",
            "elevation": 12.0,
            "daily_units": {
                "time": "iso8601",
                "temperature_2m_max": "°F",
                "temperature_2m_min": "°F",
                "et0_fao_evapotranspiration": "inch",
            },
            "daily": {
                "time": ["2026-10-19", "2026-10-20"],
                "temperature_2m_max": [78.1, 80.3],
                "temperature_2m_min": [51.0, 52.4],
                "precipitation_sum": [0.0, 0.02],
                "rain_sum": [0.0, 0.02],
                "et0_fao_evapotranspiration": [0.17, 0.19],
                "et0_fao_evapotranspiration_sum": [0.17, 0.36],
            },
            "hourly": {
                "time": ["2026-10-19T00:00", "2026-10-19T01:00"],
                "temperature_2m": [55.2, 54.8],
                "relative_humidity_2m": [81, 83],
            },
        }
    )


# === FIXTURES ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def medium() -> MemoryMedium:
    return MemoryMedium()


@pytest.fixture
def fetcher(clock: FakeClock) -> FakeFetcher:
    return FakeFetcher(clock)


@pytest.fixture
def weather_factory() -> Callable[..., WeatherResponse]:
    return make_weather


@pytest.fixture
def sample_weather() -> WeatherResponse:
    return make_weather()


@pytest.fixture
def sample_location() -> Location:
    return Location(latitude=36.6777, longitude=-121.6555, name="Salinas")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from any .env, with the cache under tmp_path."""
    return Settings(
        _env_file=None,
        cache_root=tmp_path / "cache",
        cache_ttl_s=1800.0,
        min_spacing_s=1.0,
        max_retries=3,
        base_delay_s=2.0,
    )


@pytest.fixture
def payload_json() -> Callable[..., dict[str, Any]]:
    """Raw JSON body as the API would send it."""

    def _make(latitude: float = 36.6777, longitude: float = -121.6555) -> dict[str, Any]:
        return make_weather(latitude, longitude).model_dump(mode="json", exclude_none=True)

    return _make
