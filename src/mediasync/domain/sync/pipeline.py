"""One sync unit: fetch -> normalize -> resolve -> write."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mediasync.config import get_provider_settings
from mediasync.domain.errors import AdapterError, MediaNotFoundError
from mediasync.domain.model import (
    IdentityKey,
    ProviderTarget,
    SyncPhase,
)
from mediasync.domain.ports import CacheKey, RequestShape

from .state import advance

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from mediasync.config import ProviderSettings
    from mediasync.domain.identity import IdentityResolver
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.model import MediaSource, SyncJob
    from mediasync.domain.ports import (
        MediaFetcher,
        MediaUnitOfWorkFactory,
        PayloadCache,
        RawPayload,
    )

    from .registry import ProviderRegistry
    from .writer import CanonicalStoreWriter

log = getLogger(__name__)


def _default_settings(source: MediaSource) -> ProviderSettings:
    return get_provider_settings(source.value)


@dataclass(slots=True, frozen=True)
class SyncOutcome:
    internal_id: UUID
    merged_ids: tuple[UUID, ...] = ()


@dataclass(slots=True)
class _Unit:
    target: ProviderTarget
    raw: RawPayload | None = None
    record: NormalizedRecord | None = None


class SyncUnitRunner:
    """Execute the pipeline for a job, advancing its phase as it goes.

    Errors propagate unchanged; the orchestrator decides whether they are
    retried. Nothing is written unless every fetch and normalization of the
    job succeeded.
    """

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        fetcher: MediaFetcher,
        cache: PayloadCache,
        resolver: IdentityResolver,
        writer: CanonicalStoreWriter,
        uow_factory: MediaUnitOfWorkFactory,
        settings_for: Callable[[MediaSource], ProviderSettings] = _default_settings,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.cache = cache
        self.resolver = resolver
        self.writer = writer
        self._uow_factory = uow_factory
        self._settings_for = settings_for

    async def run(self, job: SyncJob) -> SyncOutcome:
        units = [_Unit(target) for target in self._expand(job)]

        advance(job, SyncPhase.FETCHING)
        for unit in units:
            unit.raw = await self._fetch(unit.target)

        advance(job, SyncPhase.NORMALIZING)
        for unit in units:
            unit.record = self._normalize(unit.target, unit.raw)

        advance(job, SyncPhase.RESOLVING)
        internal_ids: list[UUID] = []
        merged: list[UUID] = []
        for unit in units:
            internal_id, merged_ids = await self._resolve_and_write(job, unit)
            internal_ids.append(internal_id)
            merged.extend(merged_ids)

        first = units[0].target
        primary = self.resolver.lookup(first.source, first.identifier, first.lot)
        advance(job, SyncPhase.DONE)
        return SyncOutcome(internal_id=primary or internal_ids[0], merged_ids=tuple(merged))

    def _expand(self, job: SyncJob) -> list[ProviderTarget]:
        target = job.target
        if isinstance(target, ProviderTarget):
            return [target]
        with self._uow_factory() as uow:
            media = uow.repositories.media
            internal_id = media.resolve_merged_id(target.internal_id)
            identities = media.list_provider_identities(internal_id)
        if not identities:
            raise MediaNotFoundError(target.internal_id)
        return [
            ProviderTarget(identity.source, identity.external_identifier, identity.lot)
            for identity in identities
        ]

    async def _fetch(self, target: ProviderTarget) -> RawPayload:
        provider = self.registry.get(target.source, target.lot)
        shape = RequestShape(target.lot)
        settings = self._settings_for(target.source)

        async def load() -> RawPayload:
            return await self.fetcher.fetch(provider, target.identifier, shape)

        return await self.cache.get_or_fetch(
            CacheKey(target.source, target.identifier, shape),
            load,
            ttl=settings.cache_ttl_seconds,
        )

    def _normalize(self, target: ProviderTarget, raw: RawPayload | None) -> NormalizedRecord:
        if raw is None:
            raise AdapterError(AdapterError.Kind.MALFORMED_PAYLOAD, "empty payload")
        provider = self.registry.get(target.source, target.lot)
        record = provider.normalize(raw, target.lot)
        if record.lot is not target.lot or record.specifics.LOT is not target.lot:
            raise AdapterError(
                AdapterError.Kind.MALFORMED_PAYLOAD,
                f"{target.source} returned {record.specifics.LOT} data for a {target.lot} request",
            )
        return record

    async def _resolve_and_write(self, job: SyncJob, unit: _Unit) -> tuple[UUID, list[UUID]]:
        target = unit.target
        record = unit.record
        if record is None:
            raise AdapterError(AdapterError.Kind.MALFORMED_PAYLOAD, "record not normalized")
        identity = IdentityKey(target.source, target.identifier, target.lot)

        async with self.resolver.bucket_lock(target.lot, record.title):
            resolution = self.resolver.resolve(
                target.source, target.identifier, target.lot, record
            )
            if job.phase is SyncPhase.RESOLVING:
                advance(job, SyncPhase.WRITING)
            await self.writer.upsert(resolution.internal_id, record, identity=identity)
            self.cache.invalidate(
                CacheKey(target.source, target.identifier, RequestShape(target.lot))
            )
            merged = await self._merge_false_splits(resolution.internal_id)

        log.debug("Synced %s -> %s (%s)", identity, resolution.internal_id, resolution.status)
        return resolution.internal_id, merged

    async def _merge_false_splits(self, internal_id: UUID) -> list[UUID]:
        with self._uow_factory() as uow:
            record = uow.repositories.media.get_canonical(internal_id)
        if record is None:
            return []
        merged: list[UUID] = []
        for duplicate_id in self.resolver.find_duplicates(record):
            survivor_id, loser_id = internal_id, duplicate_id
            with self._uow_factory() as uow:
                duplicate = uow.repositories.media.get_canonical(duplicate_id)
            # Older record survives.
            if duplicate is not None and duplicate.created_at < record.created_at:
                survivor_id, loser_id = duplicate_id, internal_id
            if await self.writer.merge_duplicate(survivor_id, loser_id):
                merged.append(loser_id)
            if loser_id == internal_id:
                break
        return merged
