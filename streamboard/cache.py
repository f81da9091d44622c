"""In-process TTL cache for batched Helix query results.

Uses cachetools.TTLCache for zero-infrastructure caching. Each query kind
(user metadata, stream status) gets its own instance with its own TTL, and
the whole batch result is stored under a single fixed key.

There is no stale fallback: a failed refresh propagates to the caller and
leaves nothing behind.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Sentinel object to distinguish "not in cache" from cached None values
_MISSING = object()


class AsyncTTLCache:
    """Async-aware TTL cache that coalesces concurrent misses.

    While a key is being fetched, every other caller for that key awaits the
    same in-flight task instead of issuing its own request. Waiters go through
    ``asyncio.shield`` so a cancelled caller does not cancel the fetch; the
    result still lands in the cache for the next caller.
    """

    def __init__(
        self,
        name: str,
        ttl: float,
        *,
        maxsize: int = 8,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._inflight: dict[str, asyncio.Task] = {}

    # --- plain operations ---

    def get(self, key: str) -> Any:
        """Return fresh value or ``_MISSING``."""
        return self._cache.get(key, _MISSING)

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def invalidate(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    @property
    def size(self) -> int:
        return len(self._cache)

    # --- read-through ---

    async def get_or_fetch(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for *key*, or run *loader* once and cache it.

        Exceptions raised by *loader* are propagated to every waiter and are
        never cached.
        """
        # 1. Fast path: fresh cache hit
        result = self.get(key)
        if result is not _MISSING:
            logger.debug(f"[{self.name}] cache hit: {key}")
            return result

        # 2. Join the fetch already running for this key, or start one
        task = self._inflight.get(key)
        if task is None:
            logger.debug(f"[{self.name}] cache miss: {key}")
            task = asyncio.create_task(self._fetch(key, loader))
            task.add_done_callback(self._log_failure)
            self._inflight[key] = task
        else:
            logger.debug(f"[{self.name}] joining in-flight fetch: {key}")

        return await asyncio.shield(task)

    async def _fetch(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        try:
            result = await loader()
            self.set(key, result)
            return result
        finally:
            self._inflight.pop(key, None)

    def _log_failure(self, task: asyncio.Task) -> None:
        # Retrieving the exception here also covers fetches whose waiters were all cancelled
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"[{self.name}] fetch failed: {type(exc).__name__}: {exc}")
