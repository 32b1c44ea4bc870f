from __future__ import annotations

import asyncio

import pytest

from storefront.cache import ProductCache
from storefront.core.exceptions import CacheException, CacheMissException, NetworkException
from storefront.core.result_primitives import Failure, Success

pytestmark = pytest.mark.unit


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_negative_ttl_is_rejected() -> None:
    with pytest.raises(CacheException) as exc:
        ProductCache(ttl_seconds=-1)
    assert exc.value.code == "INVALID_TTL"


def test_lookup_miss_is_a_cache_miss_failure() -> None:
    r = ProductCache().lookup("products:all")
    assert isinstance(r.error, CacheMissException)
    assert r.error.cache_key == "products:all"


def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache = ProductCache(ttl_seconds=60, clock=clock)
    cache.store("k", [1, 2])
    assert cache.lookup("k") == Success([1, 2])

    clock.now += 60
    r = cache.lookup("k")
    assert r.contains_error(CacheMissException)
    assert len(cache) == 0


def test_invalidate_and_clear() -> None:
    cache = ProductCache()
    cache.store("a", 1)
    cache.store("b", 2)
    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_get_or_fetch_is_single_flight() -> None:
    cache = ProductCache()
    calls = 0

    async def work() -> Success[str]:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        return Success("payload")

    r1, r2, r3 = await asyncio.gather(
        cache.get_or_fetch("k", work),
        cache.get_or_fetch("k", work),
        cache.get_or_fetch("k", work),
    )
    assert r1 == r2 == r3 == Success("payload")
    assert calls == 1
    assert await cache.get_or_fetch("k", work) == Success("payload")
    assert calls == 1


@pytest.mark.asyncio
async def test_failures_are_shared_but_not_cached() -> None:
    cache = ProductCache()
    calls = 0
    error = NetworkException("offline")

    async def work() -> Failure[str]:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return Failure(error)

    r1, r2 = await asyncio.gather(
        cache.get_or_fetch("k", work), cache.get_or_fetch("k", work)
    )
    assert r1.error is error and r2.error is error
    assert calls == 1
    assert len(cache) == 0

    await cache.get_or_fetch("k", work)
    assert calls == 2
