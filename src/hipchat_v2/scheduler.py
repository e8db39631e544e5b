"""Staggered dispatch of a batch of async operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class Completion(Generic[T]):
    """The outcome of one scheduled operation."""

    index: int
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RateLimitedScheduler:
    """Start operation ``i`` of a batch ``i * interval`` after the batch begins.

    Every operation runs as its own task, so slow operations never hold back
    the ones dispatched after them. Outcomes are yielded as they finish,
    which is not necessarily dispatch order. There is no cancellation: once
    a batch is started, every operation in it fires.
    """

    def __init__(
        self,
        interval: timedelta = timedelta(seconds=1),
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._sleep = sleep

    def delay_for(self, index: int) -> float:
        return index * self.interval.total_seconds()

    async def _dispatch(self, index: int, operation: Operation[T]) -> Completion[T]:
        await self._sleep(self.delay_for(index))
        log.debug("Dispatching operation %d", index)
        try:
            return Completion(index, value=await operation())
        except Exception as e:
            return Completion(index, error=e)

    async def completions(
        self, operations: Sequence[Operation[T]]
    ) -> AsyncGenerator[Completion[T], None]:
        """Run the batch, yielding each operation's outcome as it finishes."""
        tasks = [
            asyncio.create_task(self._dispatch(index, operation))
            for index, operation in enumerate(operations)
        ]
        for next_done in asyncio.as_completed(tasks):
            yield await next_done
