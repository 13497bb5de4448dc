"""Ports for external media providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.model import MediaLot, MediaSource

type RawPayload = dict[str, Any]


@dataclass(slots=True, frozen=True)
class RequestShape:
    """What is being asked of a provider for one identifier."""

    lot: MediaLot
    variant: str = "details"


@dataclass(slots=True, frozen=True)
class CacheKey:
    source: MediaSource
    identifier: str
    shape: RequestShape

    def __str__(self) -> str:
        return f"{self.source}:{self.shape.lot}:{self.shape.variant}:{self.identifier}"


@runtime_checkable
class MediaProvider(Protocol):
    """Capability shared by every provider adapter.

    ``fetch_raw`` performs the HTTP I/O for one identifier and returns a single
    JSON-like document. ``normalize`` is pure and raises ``AdapterError`` for
    payloads it cannot translate.
    """

    @property
    def source(self) -> MediaSource: ...

    @property
    def lots(self) -> frozenset[MediaLot]: ...

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload: ...

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord: ...

    async def aclose(self) -> None: ...


@runtime_checkable
class MediaFetcher(Protocol):
    """Rate-limited, retrying access to a provider's raw documents."""

    async def fetch(
        self,
        provider: MediaProvider,
        identifier: str,
        shape: RequestShape,
        *,
        deadline: float | None = None,
    ) -> RawPayload: ...


@runtime_checkable
class PayloadCache(Protocol):
    """Read-through cache of raw provider documents."""

    async def get_or_fetch(
        self,
        key: CacheKey,
        fetcher: Callable[[], Awaitable[RawPayload]],
        ttl: float | None = None,
    ) -> RawPayload: ...

    def invalidate(self, key: CacheKey) -> bool: ...
