"""Shared fixtures for hipchat-v2 tests."""

from collections.abc import AsyncIterator, Awaitable, Callable

import pytest

from hipchat_v2.client import HipchatClient

BASE = "https://hipchat.test/v2"


@pytest.fixture()
async def hipchat() -> AsyncIterator[HipchatClient]:
    """HipchatClient pointed at a fake API host (routes are mocked with respx)."""
    async with HipchatClient("test-token", base_url=BASE, timeout=5) as client:
        yield client


@pytest.fixture()
def delays() -> list[float]:
    return []


@pytest.fixture()
def no_sleep(delays: list[float]) -> Callable[[float], Awaitable[None]]:
    """A sleep that records the requested delay and returns immediately."""

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    return sleep
