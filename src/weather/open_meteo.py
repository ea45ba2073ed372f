# src/weather/open_meteo.py — v2
"""Open-Meteo forecast fetcher.

One call to ``fetch`` is one HTTP request. Failures are mapped onto the
weather error taxonomy; retrying and caching happen in the layers above.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from etweather.config.settings import Settings
from etweather.core.models import Location, WeatherResponse
from etweather.weather.errors import NetworkError, RateLimited, UpstreamError

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


class OpenMeteoFetcher:
    """Fetch daily and hourly forecasts from the Open-Meteo API."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._settings.weather_request_timeout_s,
        )

    def build_params(self, location: Location) -> dict[str, Any]:
        """Build forecast query parameters for ``location``."""
        s = self._settings
        params: dict[str, Any] = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "daily": ",".join(s.forecast_daily_list),
            "forecast_days": s.forecast_days,
            "models": s.forecast_model,
            "timezone": s.forecast_timezone,
            "temperature_unit": s.temperature_unit,
            "wind_speed_unit": s.wind_speed_unit,
            "precipitation_unit": s.precipitation_unit,
        }
        if s.forecast_hourly_list:
            params["hourly"] = ",".join(s.forecast_hourly_list)
        return params

    async def fetch(self, location: Location) -> WeatherResponse:
        """Fetch the forecast for ``location``.

        Raises:
            RateLimited: HTTP 429.
            NetworkError: Transport failure, timeout or redirect loop.
            UpstreamError: Any other non-2xx status, an undecodable body or an
                invalid payload.
        """
        t0 = time.monotonic()
        try:
            resp = await self._client.get(
                self._settings.weather_api_url, params=self.build_params(location),
            )
        except httpx.DecodingError as e:
            raise UpstreamError(f"Undecodable response for {location.label}: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Request for {location.label} failed: {e}") from e
        latency = int((time.monotonic() - t0) * 1000)

        if resp.status_code == HTTP_TOO_MANY_REQUESTS:
            raise RateLimited(
                f"Rate limited fetching {location.label}",
                retry_after_s=_parse_retry_after(resp.headers.get("Retry-After")),
            )
        if not resp.is_success:
            raise UpstreamError(
                f"Weather API returned {resp.status_code} for {location.label}: "
                f"{_error_reason(resp)}",
                status_code=resp.status_code,
            )

        try:
            weather = WeatherResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise UpstreamError(
                f"Invalid weather payload for {location.label}: {e.error_count()} errors",
                status_code=resp.status_code,
            ) from e

        logger.debug("Fetched forecast for %s in %dms", location.label, latency)
        return weather

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def _error_reason(resp: httpx.Response) -> str:
    # Open-Meteo reports errors as {"error": true, "reason": "..."}
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or "unknown error"
    if isinstance(body, dict) and body.get("reason"):
        return str(body["reason"])
    return resp.reason_phrase or "unknown error"
