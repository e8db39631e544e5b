"""Tests for staggered batch dispatch."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import timedelta

from hipchat_v2.scheduler import Completion, RateLimitedScheduler

SleepFn = Callable[[float], Awaitable[None]]


def _returning(value: int, started: list[int] | None = None):
    async def operation() -> int:
        if started is not None:
            started.append(value)
        return value

    return operation


async def _collect(scheduler: RateLimitedScheduler, operations) -> list[Completion]:
    return [c async for c in scheduler.completions(operations)]


async def test_dispatch_delays_are_spaced_by_interval(
    no_sleep: SleepFn, delays: list[float]
):
    scheduler = RateLimitedScheduler(sleep=no_sleep)
    await _collect(scheduler, [_returning(i) for i in range(4)])
    assert sorted(delays) == [0.0, 1.0, 2.0, 3.0]


async def test_custom_interval(no_sleep: SleepFn, delays: list[float]):
    scheduler = RateLimitedScheduler(timedelta(milliseconds=250), sleep=no_sleep)
    await _collect(scheduler, [_returning(i) for i in range(3)])
    assert sorted(delays) == [0.0, 0.25, 0.5]


async def test_dispatches_in_index_order(no_sleep: SleepFn):
    started: list[int] = []
    scheduler = RateLimitedScheduler(sleep=no_sleep)
    await _collect(scheduler, [_returning(i, started) for i in range(5)])
    assert started == [0, 1, 2, 3, 4]


async def test_real_sleep_staggers_dispatch():
    loop = asyncio.get_running_loop()
    started: dict[int, float] = {}

    def timed(index: int):
        async def operation() -> int:
            started[index] = loop.time()
            return index

        return operation

    scheduler = RateLimitedScheduler(timedelta(milliseconds=50))
    await _collect(scheduler, [timed(i) for i in range(3)])

    assert started[0] < started[1] < started[2]
    assert started[2] - started[0] >= 0.09


async def test_completions_follow_finish_order(no_sleep: SleepFn):
    first_may_finish = asyncio.Event()

    async def slow() -> str:
        await first_may_finish.wait()
        return "slow"

    async def fast() -> str:
        first_may_finish.set()
        return "fast"

    scheduler = RateLimitedScheduler(sleep=no_sleep)
    completions = await _collect(scheduler, [slow, fast])

    assert [c.index for c in completions] == [1, 0]
    assert [c.value for c in completions] == ["fast", "slow"]


async def test_failures_are_reported_without_stopping_the_batch(no_sleep: SleepFn):
    async def boom() -> int:
        raise RuntimeError("nope")

    scheduler = RateLimitedScheduler(sleep=no_sleep)
    completions = await _collect(scheduler, [_returning(0), boom, _returning(2)])

    by_index = {c.index: c for c in completions}
    assert len(by_index) == 3
    assert by_index[0].ok and by_index[0].value == 0
    assert by_index[2].ok and by_index[2].value == 2
    assert not by_index[1].ok
    assert isinstance(by_index[1].error, RuntimeError)


async def test_empty_batch(no_sleep: SleepFn, delays: list[float]):
    scheduler = RateLimitedScheduler(sleep=no_sleep)
    assert await _collect(scheduler, []) == []
    assert delays == []


def test_delay_for():
    scheduler = RateLimitedScheduler(timedelta(seconds=2))
    assert scheduler.delay_for(0) == 0.0
    assert scheduler.delay_for(3) == 6.0
