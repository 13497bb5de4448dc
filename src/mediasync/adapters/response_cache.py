"""In-process read-through cache of raw provider documents."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mediasync.domain.ports import CacheKey, RawPayload

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CacheEntry:
    payload: RawPayload
    fetched_at: float
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    shared: int = 0
    evictions: int = 0
    expirations: int = 0


class ResponseCache:
    """LRU + TTL cache with at most one in-flight load per key.

    Concurrent callers for a key that is being loaded await the same task.
    A caller that is cancelled stops waiting without cancelling the load.
    Failed loads are not cached. Expiry is checked lazily on access; the
    entry-count ceiling evicts least-recently-used entries regardless of TTL.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        default_ttl_seconds: float | None = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self.default_ttl_seconds = default_ttl_seconds
        self.stats = CacheStats()
        self._clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._inflight: dict[CacheKey, asyncio.Task[RawPayload]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def get_or_fetch(
        self,
        key: CacheKey,
        fetcher: Callable[[], Awaitable[RawPayload]],
        ttl: float | None = None,
    ) -> RawPayload:
        entry = self._live_entry(key)
        if entry is not None:
            self.stats.hits += 1
            return entry.payload

        task = self._inflight.get(key)
        if task is None:
            self.stats.misses += 1
            task = asyncio.create_task(self._load(key, fetcher, ttl), name=f"cache-load-{key}")
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._load_finished(key, done))
        else:
            self.stats.shared += 1
        return await asyncio.shield(task)

    def peek(self, key: CacheKey) -> RawPayload | None:
        """Return a live cached payload without loading or touching LRU order."""

        entry = self._entries.get(key)
        if entry is None or entry.expired(self._clock()):
            return None
        return entry.payload

    def invalidate(self, key: CacheKey) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def _live_entry(self, key: CacheKey) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            self.stats.expirations += 1
            return None
        self._entries.move_to_end(key)
        return entry

    async def _load(
        self,
        key: CacheKey,
        fetcher: Callable[[], Awaitable[RawPayload]],
        ttl: float | None,
    ) -> RawPayload:
        payload = await fetcher()
        now = self._clock()
        effective_ttl = self.default_ttl_seconds if ttl is None else ttl
        expires_at = now + effective_ttl if effective_ttl is not None else None
        self._entries[key] = CacheEntry(payload=payload, fetched_at=now, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _entry = self._entries.popitem(last=False)
            self.stats.evictions += 1
            log.debug("Evicted %s from response cache", evicted)
        return payload

    def _load_finished(self, key: CacheKey, task: asyncio.Task[RawPayload]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the exception retrieved; every waiter already received it.
        if not task.cancelled():
            task.exception()
