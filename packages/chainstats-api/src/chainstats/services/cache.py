"""In-process TTL cache with single-flight recomputation.

One ``CacheCoordinator`` is created per application and handed to the
code paths that need it; each call site names its key and TTL.

Per key the lifecycle is ``empty -> computing -> populated -> stale ->
computing -> ...``. Stale values are never served: a stale key behaves
like an empty one and waits for the recomputation.

Not shared across processes: every worker keeps its own cache.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chainstats.errors import ComputeFailure, StatsError

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"
    COMPUTING = "computing"
    POPULATED = "populated"
    STALE = "stale"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    computed_at: float


def _consume_exception(task: asyncio.Task) -> None:
    # Every waiter may have gone away; keep asyncio from logging the error twice
    if not task.cancelled():
        task.exception()


class CacheCoordinator:
    """Key-scoped cache in front of expensive computations.

    ``clock`` returns seconds on a monotonic scale and is injectable so
    tests can step time across a TTL boundary.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def state(self, key: str, ttl_seconds: float) -> CacheState:
        """Current lifecycle state of ``key`` for the given TTL."""
        if key in self._inflight:
            return CacheState.COMPUTING
        entry = self._entries.get(key)
        if entry is None:
            return CacheState.EMPTY
        if self._is_fresh(entry, ttl_seconds):
            return CacheState.POPULATED
        return CacheState.STALE

    def invalidate(self, key: str) -> None:
        """Drop the cached value for ``key``. An in-flight computation is left alone."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def _is_fresh(self, entry: CacheEntry, ttl_seconds: float) -> bool:
        return self._clock() - entry.computed_at < ttl_seconds

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: float,
        compute: Callable[[], Awaitable[Any]],
        single_flight: bool = True,
    ) -> Any:
        """Return the cached value for ``key`` or compute and cache it.

        With ``single_flight`` only one ``compute`` runs per key at a time;
        concurrent callers wait for it and share its result or its error.
        The computation runs in its own task, so a caller that is cancelled
        while waiting does not cancel it and the result still lands in the
        cache. Failures are never cached.
        """
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry, ttl_seconds):
            logger.debug("Cache hit for %s", key)
            return entry.value

        if not single_flight:
            return await self._compute_and_store(key, compute)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._flight(key, compute))
            task.add_done_callback(_consume_exception)
            self._inflight[key] = task
        else:
            logger.debug("Joining in-flight computation for %s", key)

        return await asyncio.shield(task)

    async def _flight(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await self._compute_and_store(key, compute)
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

    async def _compute_and_store(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        logger.info("Computing %s", key)
        started = self._clock()
        try:
            value = await compute()
        except StatsError:
            logger.warning("Computation for %s failed", key, exc_info=True)
            raise
        except Exception as exc:
            logger.warning("Computation for %s failed", key, exc_info=True)
            raise ComputeFailure(key) from exc

        self._entries[key] = CacheEntry(value=value, computed_at=self._clock())
        logger.info("Cached %s (%.2fs)", key, self._clock() - started)
        return value
