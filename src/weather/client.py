# src/weather/client.py — v2
"""Public weather client — single entry point for forecasts.

Usage:
    from etweather.weather.client import WeatherClient
    async with WeatherClient() as client:
        weather = await client.get_weather_data(Location(latitude=36.6, longitude=-121.6))

A request flows: cache lookup -> (miss) scheduler queue -> cache recheck at
admission -> fetch with rate-limit retry -> cache write -> snapshot write.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable

from etweather.cache.location_key import location_key
from etweather.cache.medium_factory import create_medium
from etweather.cache.memory_store import WeatherCache
from etweather.cache.persistence import CachePersistence
from etweather.config.settings import Settings
from etweather.core.clock import Clock, SystemClock
from etweather.core.models import Location, LocationWeatherResult, WeatherResponse
from etweather.logging.context import set_request_context
from etweather.weather.errors import RateLimited, WeatherError
from etweather.weather.retry import RetryPolicy, fetch_with_retry
from etweather.weather.scheduler import RequestScheduler

logger = logging.getLogger(__name__)

FetchFn = Callable[[Location], Awaitable[WeatherResponse]]


class WeatherClient:
    """Cached, serialized, rate-limit-tolerant access to the weather API."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        fetch: FetchFn | None = None,
        cache: WeatherCache | None = None,
        persistence: CachePersistence | None = None,
        scheduler: RequestScheduler | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Build a client.

        Args:
            settings: Global settings. Loaded from .env if None.
            fetch: Upstream fetch primitive. Defaults to OpenMeteoFetcher.fetch.
            cache: In-memory store. Built from settings if None.
            persistence: Snapshot persistence. Built from settings if None.
            scheduler: Admission queue. Built from settings if None.
            clock: Time source shared by the default cache, scheduler and
                retry backoff.
        """
        self._settings = settings or Settings()
        self._clock = clock or SystemClock()

        self._fetcher = None
        if fetch is None:
            from etweather.weather.open_meteo import OpenMeteoFetcher

            self._fetcher = OpenMeteoFetcher(self._settings)
            fetch = self._fetcher.fetch
        self._fetch = fetch

        if cache is None:
            cache = WeatherCache(self._settings.cache_ttl_s, clock=self._clock)
        self._cache = cache
        self._owns_persistence = persistence is None
        self._persistence = persistence or CachePersistence(
            create_medium(self._settings),
            version=self._settings.cache_version,
            storage_key=self._settings.cache_storage_key,
        )
        self._scheduler = scheduler or RequestScheduler(
            self._settings.min_spacing_s, clock=self._clock,
        )
        self._retry_policy = RetryPolicy(
            max_retries=self._settings.max_retries,
            base_delay_s=self._settings.base_delay_s,
        )
        self._load_lock = asyncio.Lock()
        self._loaded = False

    @property
    def cache(self) -> WeatherCache:
        return self._cache

    @property
    def scheduler(self) -> RequestScheduler:
        return self._scheduler

    async def load_cache(self) -> int:
        """Load the persisted snapshot once per client.

        Returns:
            Number of entries restored (0 on later calls).
        """
        async with self._load_lock:
            if self._loaded:
                return 0
            self._loaded = True
            snapshot = await self._persistence.load()
            if snapshot is None:
                return 0
            restored = self._cache.restore(snapshot)
            logger.info(
                "Restored %d cached forecasts (version %s)", restored, snapshot.version,
            )
            return restored

    async def get_weather_data(self, location: Location) -> WeatherResponse:
        """Return the forecast for ``location``, from cache when fresh.

        Raises:
            RateLimited: Upstream kept throttling after all retries.
            NetworkError: The weather service was unreachable.
            UpstreamError: The weather service answered with an error.
        """
        await self.load_cache()

        key = location_key(location)
        entry = self._cache.get(key)
        if entry is not None:
            logger.debug("Cache hit for %s", key)
            return entry.payload

        logger.debug("Cache miss for %s, queueing (%d pending)", key, self._scheduler.pending)

        def recheck() -> WeatherResponse | None:
            cached = self._cache.get(key)
            return None if cached is None else cached.payload

        async def backoff(delay: float) -> None:
            # each retry is an upstream call, spaced like an admission
            await self._clock.sleep(delay)
            await self._scheduler.pace()

        async def work() -> WeatherResponse:
            set_request_context(uuid.uuid4().hex[:12], key)
            weather = await fetch_with_retry(
                self._fetch, location, policy=self._retry_policy, sleep=backoff,
            )
            self._cache.put(key, weather)
            await self._persistence.save(self._cache)
            return weather

        try:
            return await self._scheduler.schedule(work, recheck=recheck)
        except RateLimited as e:
            logger.info("Weather for %s deferred: %s", location.label, e)
            raise
        except WeatherError as e:
            logger.warning("Weather fetch failed for %s: %s", location.label, e)
            raise

    async def refresh_locations(
        self, locations: Iterable[Location]
    ) -> list[LocationWeatherResult]:
        """Fetch weather for many locations, one result per location in order.

        All requests are issued together; the scheduler serializes the
        upstream side. A failure for one location never aborts the others.
        """
        locations = list(locations)
        outcomes = await asyncio.gather(
            *(self.get_weather_data(loc) for loc in locations),
            return_exceptions=True,
        )

        results: list[LocationWeatherResult] = []
        for loc, outcome in zip(locations, outcomes):
            if isinstance(outcome, WeatherResponse):
                results.append(
                    LocationWeatherResult(
                        location=loc,
                        weather=outcome,
                        last_updated=datetime.now(timezone.utc),
                    )
                )
            elif isinstance(outcome, WeatherError):
                results.append(
                    LocationWeatherResult(
                        location=loc,
                        error=outcome.user_message,
                        rate_limited=isinstance(outcome, RateLimited),
                    )
                )
            else:
                raise outcome

        ok = sum(1 for r in results if r.ok)
        logger.info("Refreshed %d/%d locations", ok, len(results))
        return results

    async def invalidate(self) -> None:
        """Drop every cached forecast, in memory and on the durable medium."""
        self._cache.clear()
        await self._persistence.clear()
        logger.info("Weather cache invalidated")

    async def aclose(self) -> None:
        """Stop the scheduler and release the HTTP client and cache medium.

        Injected fetchers and persistence belong to the caller and stay open.
        """
        await self._scheduler.aclose()
        if self._fetcher is not None:
            await self._fetcher.aclose()
        if self._owns_persistence:
            self._persistence.medium.close()

    async def __aenter__(self) -> WeatherClient:
        await self.load_cache()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
