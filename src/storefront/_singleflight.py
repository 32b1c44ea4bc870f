"""Async single-flight helper for Result-producing work.

Used to coordinate concurrent requests for the same key so only one coroutine
performs the work, while others await the same Future. Successful values are
cached; Failures are shared with the waiters of that flight but never cached.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from storefront.core.result_primitives import Success

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storefront.core.result_primitives import Result

K = TypeVar("K")
T = TypeVar("T")


def consume_future_exception(fut: asyncio.Future[Any]) -> None:
    """Avoid 'Future exception was never retrieved' for coordination futures."""
    if fut.cancelled():
        return
    _ = fut.exception()


async def singleflight_cached(
    key: K,
    *,
    lock: asyncio.Lock,
    inflight: dict[K, asyncio.Future[Result[T]]],
    cache_get: Callable[[K], Result[T]],
    cache_set: Callable[[K, T], None],
    work: Callable[[], Awaitable[Result[T]]],
) -> Result[T]:
    """Return the cached value for key, or compute it once with single-flight.

    - If ``cache_get`` yields a Success, it is returned immediately.
    - If a flight for the key is in progress, its Result is awaited.
    - Otherwise this coroutine runs *work* as the single creator.
    """
    cached = cache_get(key)
    if isinstance(cached, Success):
        return cached

    async with lock:
        cached = cache_get(key)
        if isinstance(cached, Success):
            return cached

        fut = inflight.get(key)
        if fut is None:
            fut = asyncio.get_running_loop().create_future()
            fut.add_done_callback(consume_future_exception)
            inflight[key] = fut
            creator = True
        else:
            creator = False

    if not creator:
        return await fut

    try:
        result = await work()
    except asyncio.CancelledError:
        fut.cancel()
        raise
    except Exception as e:
        fut.set_exception(e)
        raise
    else:
        if isinstance(result, Success):
            async with lock:
                cache_set(key, result.value)
        fut.set_result(result)
        return result
    finally:
        async with lock:
            inflight.pop(key, None)
