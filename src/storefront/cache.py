"""Cache: in-memory catalog entries with expires_at tracking."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING, Any

from storefront._singleflight import singleflight_cached
from storefront.core.exceptions import CacheException, CacheMissException
from storefront.core.result_primitives import Failure, Success

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storefront.core.result_primitives import Result

log = logging.getLogger(__name__)


@dataclass
class ProductCache:
    """Registry of catalog responses keyed by request, each with an expiry."""

    ttl_seconds: float = 1800.0
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, tuple[Any, float]] = field(default_factory=dict)
    _inflight: dict[str, asyncio.Future[Any]] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        """Reject a negative TTL."""
        if self.ttl_seconds < 0:
            raise CacheException(
                f"ttl_seconds must be >= 0, got {self.ttl_seconds}",
                code="INVALID_TTL",
            )

    def lookup(self, key: str) -> Result[Any]:
        """Return the cached value, or a CacheMissException Failure."""
        entry = self._entries.get(key)
        if entry is None:
            return Failure(CacheMissException("No cache entry", cache_key=key))
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return Failure(CacheMissException("Cache entry expired", cache_key=key))
        return Success(value)

    def store(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` until the TTL elapses."""
        self._entries[key] = (value, self.clock() + max(0.0, self.ttl_seconds))

    def invalidate(self, key: str) -> bool:
        """Drop one entry; return True if it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_fetch(
        self, key: str, work: Callable[[], Awaitable[Result[Any]]]
    ) -> Result[Any]:
        """Return the cached value or run ``work`` once for concurrent callers.

        Only Success values are stored.
        """
        result = await singleflight_cached(
            key,
            lock=self._lock,
            inflight=self._inflight,
            cache_get=self.lookup,
            cache_set=self.store,
            work=work,
        )
        if isinstance(result, Failure):
            log.debug("Not caching failed fetch for %s: %s", key, result.error)
        return result
