"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import MediaRepository, SyncFailureRepository
from .providers import (
    CacheKey,
    MediaFetcher,
    MediaProvider,
    PayloadCache,
    RawPayload,
    RequestShape,
)
from .unit_of_work import (
    MediaRepositories,
    MediaUnitOfWork,
    MediaUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CacheKey",
    "MediaFetcher",
    "MediaProvider",
    "MediaRepositories",
    "MediaRepository",
    "MediaUnitOfWork",
    "MediaUnitOfWorkFactory",
    "PayloadCache",
    "RawPayload",
    "RepositoryCollection",
    "RequestShape",
    "SyncFailureRepository",
    "UnitOfWork",
]
