# src/core/clock.py — v2
"""Time source abstraction.

Cache freshness, request spacing and retry backoff all read time through a
Clock so tests can drive them without real timers. Cache timestamps are epoch
seconds because entries outlive the process that wrote them; request spacing
uses a monotonic reading so wall-clock steps cannot stretch or skip it.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Wall-clock and monotonic reads plus cooperative sleeping."""

    def now(self) -> float:
        """Current time in epoch seconds."""

    def monotonic(self) -> float:
        """Seconds from an arbitrary origin that never goes backwards."""

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""


class SystemClock:
    """Clock backed by ``time.time``, ``time.monotonic`` and ``asyncio.sleep``."""

    def now(self) -> float:
        return time.time()

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))
