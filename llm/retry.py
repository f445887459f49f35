"""Bounded retry of asynchronous work built on tenacity."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_none
from tenacity.wait import wait_base

T = TypeVar("T")

LOGGER = logging.getLogger("testpilot.llm.retry")


async def retry(
    work: Callable[[], Awaitable[T]],
    attempts: int,
    *,
    wait: wait_base | None = None,
) -> T:
    """
    Run ``work`` until it succeeds or ``attempts`` runs have failed.

    Args:
        work: Zero-argument coroutine factory, invoked once per attempt
        attempts: Maximum number of runs including the first
        wait: Optional tenacity wait strategy between attempts

    Returns:
        The result of the first successful run

    Raises:
        The exception of the final attempt once the budget is spent
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    # ``work`` is usually a lambda returning a coroutine, so it is awaited here
    # rather than handed to tenacity, which only awaits coroutine functions.
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait or wait_none(),
        before_sleep=before_sleep_log(LOGGER, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            return await work()
    raise AssertionError("unreachable: tenacity reraises the last failure")
