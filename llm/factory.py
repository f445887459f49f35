"""
Builds rate limiters and chat models from settings.
"""
from __future__ import annotations

import httpx
from tenacity import wait_exponential

from app.errors import ConfigurationError
from app.settings import Settings
from llm.chat_model import ChatModel
from llm.rate_limit import BenchmarkRateLimiter, FixedRateLimiter, NoRateLimiter, RateLimiter


def create_rate_limiter(settings: Settings) -> RateLimiter:
    """Create the rate limiter selected by ``settings.rate_limiter``."""
    policy = settings.rate_limiter.lower()

    if policy == "fixed":
        return FixedRateLimiter(settings.rate_limit_interval_seconds)
    elif policy == "benchmark":
        try:
            return BenchmarkRateLimiter(
                initial_interval=settings.rate_limit_interval_seconds,
                max_interval=max(
                    settings.rate_limit_max_interval_seconds,
                    settings.rate_limit_interval_seconds,
                ),
            )
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid benchmark rate limiter settings: {exc}. "
                f"Set TESTPILOT_RATE_LIMIT_INTERVAL_SECONDS to a positive value."
            ) from exc
    elif policy == "none":
        return NoRateLimiter()
    else:
        raise ConfigurationError(
            f"Unknown rate limiter: '{policy}'. "
            f"Set TESTPILOT_RATE_LIMITER to 'fixed', 'benchmark', or 'none'."
        )


def create_chat_model(
    settings: Settings,
    rate_limiter: RateLimiter | None = None,
    client: httpx.AsyncClient | None = None,
) -> ChatModel:
    return ChatModel(
        settings.llm_model,
        settings.llm_attempts,
        rate_limiter or create_rate_limiter(settings),
        {
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "top_p": settings.llm_top_p,
        },
        client=client,
        retry_wait=wait_exponential(
            multiplier=1,
            min=settings.retry_wait_min_seconds,
            max=settings.retry_wait_max_seconds,
        ),
        settings=settings,
    )
