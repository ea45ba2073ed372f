# src/weather/scheduler.py — v2
"""Serialized FIFO admission gate for upstream requests.

Every unit of work goes through one queue drained by a single task, so at
most one upstream call is in flight and successive calls start at least
``min_spacing_s`` apart. This is the client-side backpressure that keeps a
dashboard with many locations under the provider's per-client rate limit.

Work that makes more than one upstream call (rate limit retries) paces each
further call through ``pace()``, so the spacing holds between every pair of
calls and not only between tickets.

A ticket's ``recheck`` runs when the ticket reaches the head of the queue.
If an earlier ticket already produced the value (same location queued
twice), the ticket resolves from it without spending an upstream call or a
spacing interval.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from etweather.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Ticket(Generic[T]):
    seq: int
    work: Callable[[], Awaitable[T]]
    recheck: Callable[[], T | None] | None
    future: asyncio.Future[T]


class RequestScheduler:
    """FIFO queue admitting one unit of work at a time with minimum spacing."""

    def __init__(self, min_spacing_s: float = 1.0, clock: Clock | None = None) -> None:
        if min_spacing_s < 0:
            raise ValueError("min_spacing_s must be >= 0")
        self._min_spacing_s = min_spacing_s
        self._clock = clock or SystemClock()
        self._queue: deque[_Ticket[Any]] = deque()
        self._worker: asyncio.Task[None] | None = None
        self._current: _Ticket[Any] | None = None
        self._last_call: float | None = None
        self._admissions = 0
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        """Number of tickets waiting for admission."""
        return len(self._queue)

    @property
    def admissions(self) -> int:
        """Number of tickets whose work has been started."""
        return self._admissions

    async def schedule(
        self,
        work: Callable[[], Awaitable[T]],
        *,
        recheck: Callable[[], T | None] | None = None,
    ) -> T:
        """Queue ``work`` and wait for its result.

        Cancelling the awaiting caller does not withdraw the ticket: its work
        still runs when admitted.

        Args:
            work: Coroutine factory run once the ticket is admitted.
            recheck: Called at admission; a non-None result is returned
                instead of running ``work``.

        Returns:
            The value produced by ``recheck`` or ``work``.
        """
        loop = asyncio.get_running_loop()
        ticket: _Ticket[T] = _Ticket(
            seq=next(self._seq), work=work, recheck=recheck, future=loop.create_future(),
        )
        ticket.future.add_done_callback(_mark_retrieved)
        self._queue.append(ticket)
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._drain())
        return await asyncio.shield(ticket.future)

    async def aclose(self) -> None:
        """Stop draining and fail every queued ticket."""
        while self._queue:
            ticket = self._queue.popleft()
            if not ticket.future.done():
                ticket.future.cancel()
        if self._current is not None and not self._current.future.done():
            self._current.future.cancel()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

    async def _drain(self) -> None:
        while self._queue:
            ticket = self._queue.popleft()
            self._current = ticket
            try:
                await self._run(ticket)
            finally:
                self._current = None

    async def _run(self, ticket: _Ticket[T]) -> None:
        if ticket.recheck is not None:
            try:
                hit = ticket.recheck()
            except Exception as e:
                _resolve(ticket, exc=e)
                return
            if hit is not None:
                logger.debug("Ticket %d resolved at admission without upstream call", ticket.seq)
                _resolve(ticket, result=hit)
                return

        await self.pace()
        self._admissions += 1
        logger.debug(
            "Ticket %d admitted (%d still queued)", ticket.seq, len(self._queue),
        )
        try:
            result = await ticket.work()
        except Exception as e:
            _resolve(ticket, exc=e)
        else:
            _resolve(ticket, result=result)

    async def pace(self) -> None:
        """Wait until ``min_spacing_s`` has passed since the last upstream call,
        then record a new call starting now.

        Called once per admission. Work running inside an admitted ticket
        calls it again before each additional upstream request.
        """
        if self._last_call is not None:
            remaining = self._min_spacing_s - (self._clock.monotonic() - self._last_call)
            if remaining > 0:
                await self._clock.sleep(remaining)
        self._last_call = self._clock.monotonic()


def _resolve(
    ticket: _Ticket[T], result: T | None = None, exc: BaseException | None = None
) -> None:
    # aclose() may already have cancelled the future.
    if ticket.future.done():
        return
    if exc is not None:
        ticket.future.set_exception(exc)
    else:
        ticket.future.set_result(result)  # type: ignore[arg-type]


def _mark_retrieved(future: asyncio.Future[Any]) -> None:
    # A caller that stopped waiting never reads its ticket's exception.
    if not future.cancelled():
        future.exception()
