# src/weather/retry.py — v1
"""Rate-limit retry with exponential backoff.

Only RateLimited is retried. Any other failure is raised on the first
attempt: retrying a broken upstream would amplify the outage.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable

from etweather.core.models import Location, WeatherResponse
from etweather.weather.errors import RateLimited

logger = logging.getLogger(__name__)

FetchFn = Callable[[Location], Awaitable[WeatherResponse]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for rate-limited requests."""

    max_retries: int = 3
    base_delay_s: float = 2.0
    backoff_factor: float = 2.0
    jitter: bool = False


def compute_delay(policy: RetryPolicy, attempt: int) -> float:
    """Compute delay before the retry following ``attempt`` (0-based)."""
    delay = policy.base_delay_s * (policy.backoff_factor ** attempt)
    if policy.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def fetch_with_retry(
    fetch: FetchFn,
    location: Location,
    *,
    policy: RetryPolicy | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> WeatherResponse:
    """Call ``fetch`` for ``location``, retrying rate-limit failures.

    At most ``policy.max_retries + 1`` calls are made.

    Raises:
        RateLimited: If every attempt was rate limited.
        NetworkError, UpstreamError: Immediately, without retrying.
    """
    policy = policy or RetryPolicy()
    attempts = 0

    while True:
        try:
            return await fetch(location)
        except RateLimited as e:
            attempts += 1
            if attempts > policy.max_retries:
                raise RateLimited(
                    f"Rate limited after {attempts} attempts for {location.label}",
                    attempts=attempts,
                    retry_after_s=e.retry_after_s,
                ) from e

            delay = compute_delay(policy, attempts - 1)
            logger.info(
                "Rate limited for %s (attempt %d/%d), retrying in %.1fs",
                location.label, attempts, policy.max_retries + 1, delay,
            )
            await sleep(delay)
