"""Rate limiters that gate units of asynchronous work."""
from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger("testpilot.llm.rate_limit")


class RateLimiter(ABC):
    """Admits units of work according to a pacing policy.

    A limiter is shared by every caller holding a reference to it and is
    never owned by them. Failures raised by the admitted work propagate
    unchanged.
    """

    @abstractmethod
    async def next(self, work: Callable[[], Awaitable[T]]) -> T:
        """Wait for admission, then run ``work`` and return its result."""

    @abstractmethod
    def description(self) -> str:
        """Human readable summary used in diagnostics."""


class NoRateLimiter(RateLimiter):
    async def next(self, work: Callable[[], Awaitable[T]]) -> T:
        return await work()

    def description(self) -> str:
        return "no rate limiting"


class _PacedRateLimiter(RateLimiter):
    def __init__(
        self,
        interval_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")
        self._interval = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._next_admission = 0.0
        self._lock = asyncio.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    async def _admit(self) -> None:
        # Only admission is serialized; admitted work runs concurrently.
        async with self._lock:
            delay = self._next_admission - self._clock()
            if delay > 0:
                await self._sleep(delay)
            self._next_admission = self._clock() + self._interval


class FixedRateLimiter(_PacedRateLimiter):
    """Starts admitted work at least ``interval_seconds`` apart."""

    async def next(self, work: Callable[[], Awaitable[T]]) -> T:
        await self._admit()
        return await work()

    def description(self) -> str:
        return f"fixed rate limiting with {self._interval:g}s between requests"


class BenchmarkRateLimiter(_PacedRateLimiter):
    """Adapts the admission interval to the outcome of admitted work.

    Each failed unit of work multiplies the interval by ``backoff_factor``
    (capped at ``max_interval``); each success multiplies it by
    ``recovery_factor`` (floored at ``min_interval``).
    """

    def __init__(
        self,
        initial_interval: float = 1.0,
        *,
        min_interval: float = 0.0,
        max_interval: float = 30.0,
        backoff_factor: float = 2.0,
        recovery_factor: float = 0.9,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if initial_interval <= 0:
            raise ValueError("initial_interval must be positive")
        if not min_interval <= initial_interval <= max_interval:
            raise ValueError("initial_interval must lie between min_interval and max_interval")
        if backoff_factor < 1:
            raise ValueError("backoff_factor must be at least 1")
        if not 0 < recovery_factor <= 1:
            raise ValueError("recovery_factor must be in (0, 1]")
        super().__init__(initial_interval, clock=clock, sleep=sleep)
        self._base_interval = initial_interval
        self._min_interval = min_interval
        self._max_interval = max_interval
        self._backoff_factor = backoff_factor
        self._recovery_factor = recovery_factor

    async def next(self, work: Callable[[], Awaitable[T]]) -> T:
        await self._admit()
        try:
            result = await work()
        except Exception:
            previous = self._interval
            self._interval = min(
                self._max_interval,
                max(self._interval, self._base_interval) * self._backoff_factor,
            )
            LOGGER.debug("rate limiter backing off from %.3fs to %.3fs", previous, self._interval)
            raise
        self._interval = max(self._min_interval, self._interval * self._recovery_factor)
        return result

    def description(self) -> str:
        return (
            f"benchmark rate limiting starting at {self._base_interval:g}s between requests "
            f"(bounds {self._min_interval:g}s-{self._max_interval:g}s)"
        )
