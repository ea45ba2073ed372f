# src/weather/errors.py — v1
"""Error taxonomy for weather acquisition.

Callers branch on the class: RateLimited means "slow down, try again
shortly"; NetworkError and UpstreamError mean the request is broken.
PersistenceError never reaches callers.
"""

from __future__ import annotations


class WeatherError(Exception):
    """Base class for weather acquisition failures."""

    transient: bool = False
    user_message: str = "Failed to fetch weather data."


class RateLimited(WeatherError):
    """Upstream throttled the request and retries were exhausted."""

    transient = True
    user_message = "Weather data temporarily unavailable, retry shortly."

    def __init__(
        self,
        message: str = "Upstream rate limit reached",
        attempts: int = 1,
        retry_after_s: float | None = None,
    ) -> None:
        self.attempts = attempts
        self.retry_after_s = retry_after_s
        super().__init__(message)


class NetworkError(WeatherError):
    """Transport-level failure: DNS, connection, timeout."""

    user_message = "Could not reach the weather service."


class UpstreamError(WeatherError):
    """Non-2xx, non-rate-limit response or an unusable payload."""

    user_message = "The weather service returned an error."

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PersistenceError(Exception):
    """Durable medium read or write failure."""

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Cache persistence {operation} failed: {cause}")
