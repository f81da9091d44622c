"""Tests for AsyncTTLCache read-through and miss coalescing"""

import asyncio

import pytest

from streamboard.cache import AsyncTTLCache
from streamboard.core.errors import UpstreamError


class CountingLoader:
    def __init__(self, value="v", delay: float = 0.0, error: Exception | None = None):
        self.value = value
        self.delay = delay
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.value


@pytest.mark.asyncio
async def test_hit_within_ttl(clock):
    cache = AsyncTTLCache("users", ttl=60, timer=clock)
    loader = CountingLoader({"a": 1})

    assert await cache.get_or_fetch("users", loader) == {"a": 1}
    clock.advance(59)
    assert await cache.get_or_fetch("users", loader) == {"a": 1}
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_refetch_after_ttl(clock):
    cache = AsyncTTLCache("streams", ttl=300, timer=clock)
    loader = CountingLoader()

    await cache.get_or_fetch("streams", loader)
    clock.advance(300)
    await cache.get_or_fetch("streams", loader)
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_concurrent_misses_collapse_to_one_fetch():
    cache = AsyncTTLCache("users", ttl=60)
    loader = CountingLoader("v", delay=0.05)

    results = await asyncio.gather(*(cache.get_or_fetch("users", loader) for _ in range(20)))

    assert results == ["v"] * 20
    assert loader.calls == 1
    assert cache.size == 1


@pytest.mark.asyncio
async def test_error_propagates_and_is_not_cached(clock):
    cache = AsyncTTLCache("streams", ttl=300, timer=clock)
    failing = CountingLoader(error=UpstreamError("down"))

    with pytest.raises(UpstreamError):
        await cache.get_or_fetch("streams", failing)
    assert cache.size == 0

    ok = CountingLoader("fresh")
    assert await cache.get_or_fetch("streams", ok) == "fresh"
    assert ok.calls == 1


@pytest.mark.asyncio
async def test_no_stale_value_served_on_error(clock):
    cache = AsyncTTLCache("streams", ttl=300, timer=clock)
    await cache.get_or_fetch("streams", CountingLoader("old"))

    clock.advance(301)
    with pytest.raises(UpstreamError):
        await cache.get_or_fetch("streams", CountingLoader(error=UpstreamError("down")))


@pytest.mark.asyncio
async def test_concurrent_waiters_all_see_error():
    cache = AsyncTTLCache("users", ttl=60)
    loader = CountingLoader(delay=0.05, error=UpstreamError("down"))

    results = await asyncio.gather(
        *(cache.get_or_fetch("users", loader) for _ in range(5)), return_exceptions=True
    )

    assert loader.calls == 1
    assert all(isinstance(r, UpstreamError) for r in results)


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_fetch():
    cache = AsyncTTLCache("users", ttl=60)
    loader = CountingLoader("v", delay=0.05)

    caller = asyncio.create_task(cache.get_or_fetch("users", loader))
    await asyncio.sleep(0.01)
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller

    await asyncio.sleep(0.1)
    assert await cache.get_or_fetch("users", loader) == "v"
    assert loader.calls == 1


def test_invalidate_and_clear():
    cache = AsyncTTLCache("users", ttl=60)
    cache.set("users", 1)
    cache.set("other", 2)

    cache.invalidate("users")
    assert cache.size == 1
    cache.invalidate("missing")
    cache.clear()
    assert cache.size == 0
