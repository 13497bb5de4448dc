from __future__ import annotations

import asyncio

import pytest

from mediasync.adapters.response_cache import ResponseCache
from mediasync.domain.model import MediaLot, MediaSource
from mediasync.domain.ports import CacheKey, RawPayload, RequestShape


def _key(identifier: str) -> CacheKey:
    return CacheKey(MediaSource.TMDB, identifier, RequestShape(MediaLot.MOVIE))


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_concurrent_misses_share_one_load() -> None:
    cache = ResponseCache()
    calls: list[str] = []

    async def fetcher() -> RawPayload:
        calls.append("load")
        await asyncio.sleep(0.01)
        return {"id": 1}

    async def scenario() -> list[RawPayload]:
        return await asyncio.gather(*(cache.get_or_fetch(_key("1"), fetcher) for _ in range(5)))

    results = asyncio.run(scenario())

    assert calls == ["load"]
    assert results == [{"id": 1}] * 5
    assert cache.stats.misses == 1
    assert cache.stats.shared == 4


def test_hit_does_not_call_fetcher() -> None:
    cache = ResponseCache()
    calls: list[str] = []

    async def fetcher() -> RawPayload:
        calls.append("load")
        return {"id": 1}

    async def scenario() -> None:
        await cache.get_or_fetch(_key("1"), fetcher)
        await cache.get_or_fetch(_key("1"), fetcher)

    asyncio.run(scenario())

    assert calls == ["load"]
    assert cache.stats.hits == 1


def test_least_recently_used_entry_is_evicted() -> None:
    cache = ResponseCache(max_entries=2)

    def fetcher_for(identifier: str):  # noqa: ANN202
        async def fetcher() -> RawPayload:
            return {"id": identifier}

        return fetcher

    async def scenario() -> None:
        await cache.get_or_fetch(_key("a"), fetcher_for("a"))
        await cache.get_or_fetch(_key("b"), fetcher_for("b"))
        await cache.get_or_fetch(_key("a"), fetcher_for("a"))
        await cache.get_or_fetch(_key("c"), fetcher_for("c"))

    asyncio.run(scenario())

    assert _key("a") in cache
    assert _key("b") not in cache
    assert _key("c") in cache
    assert len(cache) == 2
    assert cache.stats.evictions == 1


def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache = ResponseCache(default_ttl_seconds=10.0, clock=clock)
    loads: list[int] = []

    async def fetcher() -> RawPayload:
        loads.append(1)
        return {"load": len(loads)}

    async def scenario() -> list[RawPayload]:
        first = await cache.get_or_fetch(_key("1"), fetcher)
        clock.now = 9.9
        second = await cache.get_or_fetch(_key("1"), fetcher)
        clock.now = 10.0
        third = await cache.get_or_fetch(_key("1"), fetcher)
        return [first, second, third]

    results = asyncio.run(scenario())

    assert results == [{"load": 1}, {"load": 1}, {"load": 2}]
    assert cache.stats.expirations == 1


def test_per_call_ttl_overrides_default() -> None:
    clock = _Clock()
    cache = ResponseCache(default_ttl_seconds=None, clock=clock)

    async def fetcher() -> RawPayload:
        return {"id": 1}

    asyncio.run(cache.get_or_fetch(_key("1"), fetcher, ttl=5.0))

    clock.now = 4.0
    assert cache.peek(_key("1")) == {"id": 1}
    clock.now = 5.0
    assert cache.peek(_key("1")) is None


def test_failed_load_is_not_cached() -> None:
    cache = ResponseCache()
    attempts: list[int] = []

    async def fetcher() -> RawPayload:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("upstream down")
        return {"id": 1}

    async def scenario() -> RawPayload:
        with pytest.raises(RuntimeError):
            await cache.get_or_fetch(_key("1"), fetcher)
        return await cache.get_or_fetch(_key("1"), fetcher)

    assert asyncio.run(scenario()) == {"id": 1}
    assert len(attempts) == 2


def test_cancelled_waiter_does_not_cancel_shared_load() -> None:
    cache = ResponseCache()
    release = asyncio.Event()

    async def fetcher() -> RawPayload:
        await release.wait()
        return {"id": 1}

    async def scenario() -> RawPayload:
        impatient = asyncio.create_task(cache.get_or_fetch(_key("1"), fetcher))
        patient = asyncio.create_task(cache.get_or_fetch(_key("1"), fetcher))
        await asyncio.sleep(0)
        impatient.cancel()
        await asyncio.gather(impatient, return_exceptions=True)
        release.set()
        return await patient

    assert asyncio.run(scenario()) == {"id": 1}
    assert _key("1") in cache


def test_invalidate_drops_entry() -> None:
    cache = ResponseCache()

    async def fetcher() -> RawPayload:
        return {"id": 1}

    asyncio.run(cache.get_or_fetch(_key("1"), fetcher))

    assert cache.invalidate(_key("1")) is True
    assert cache.invalidate(_key("1")) is False


def test_max_entries_must_be_positive() -> None:
    with pytest.raises(ValueError, match="max_entries"):
        ResponseCache(max_entries=0)
