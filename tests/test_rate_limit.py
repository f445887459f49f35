from __future__ import annotations

import asyncio

import pytest

from llm.rate_limit import BenchmarkRateLimiter, FixedRateLimiter, NoRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


async def _value(value):
    return value


async def _boom():
    raise RuntimeError("boom")


def test_no_rate_limiter_runs_work_directly():
    limiter = NoRateLimiter()
    assert asyncio.run(limiter.next(lambda: _value("ok"))) == "ok"
    assert limiter.description() == "no rate limiting"


def test_fixed_rate_limiter_spaces_admissions():
    clock = FakeClock()
    limiter = FixedRateLimiter(2.0, clock=clock, sleep=clock.sleep)

    async def run():
        return [await limiter.next(lambda i=i: _value(i)) for i in range(3)]

    assert asyncio.run(run()) == [0, 1, 2]
    assert clock.sleeps == [2.0, 2.0]


def test_fixed_rate_limiter_does_not_wait_after_idle_period():
    clock = FakeClock()
    limiter = FixedRateLimiter(1.0, clock=clock, sleep=clock.sleep)

    async def run():
        await limiter.next(lambda: _value(None))
        clock.now += 5.0
        await limiter.next(lambda: _value(None))

    asyncio.run(run())
    assert clock.sleeps == []


def test_fixed_rate_limiter_propagates_failures_unchanged():
    limiter = FixedRateLimiter(0.0)
    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(limiter.next(_boom))


def test_fixed_rate_limiter_serializes_concurrent_admissions():
    clock = FakeClock()
    limiter = FixedRateLimiter(1.0, clock=clock, sleep=clock.sleep)

    async def run():
        return await asyncio.gather(*(limiter.next(lambda i=i: _value(i)) for i in range(4)))

    assert sorted(asyncio.run(run())) == [0, 1, 2, 3]
    assert clock.sleeps == [1.0, 1.0, 1.0]


def test_fixed_rate_limiter_rejects_negative_interval():
    with pytest.raises(ValueError):
        FixedRateLimiter(-1.0)


def test_fixed_rate_limiter_description_mentions_interval():
    assert "1.5s" in FixedRateLimiter(1.5).description()


def test_benchmark_rate_limiter_backs_off_on_failure_and_recovers():
    clock = FakeClock()
    limiter = BenchmarkRateLimiter(
        1.0,
        min_interval=0.5,
        max_interval=3.0,
        backoff_factor=2.0,
        recovery_factor=0.5,
        clock=clock,
        sleep=clock.sleep,
    )

    async def run():
        for _ in range(2):
            with pytest.raises(RuntimeError):
                await limiter.next(_boom)
        intervals = [limiter.interval]
        await limiter.next(lambda: _value("ok"))
        intervals.append(limiter.interval)
        await limiter.next(lambda: _value("ok"))
        intervals.append(limiter.interval)
        await limiter.next(lambda: _value("ok"))
        intervals.append(limiter.interval)
        return intervals

    assert asyncio.run(run()) == [3.0, 1.5, 0.75, 0.5]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"initial_interval": 0},
        {"initial_interval": 5.0, "max_interval": 2.0},
        {"backoff_factor": 0.5},
        {"recovery_factor": 0},
        {"recovery_factor": 1.5},
    ],
)
def test_benchmark_rate_limiter_validates_parameters(kwargs):
    with pytest.raises(ValueError):
        BenchmarkRateLimiter(**kwargs)


def test_benchmark_rate_limiter_description():
    assert BenchmarkRateLimiter(2.0).description().startswith("benchmark rate limiting starting at 2s")
