"""Map provider identities onto canonical records without minting duplicates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from mediasync.config import SyncConfig
from mediasync.domain.locks import KeyedLocks
from mediasync.domain.model import IdentityKey, ProviderIdentity, new_id

from .normalize import title_bucket
from .similarity import MatchScore, choose_match, score_candidate

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager
    from uuid import UUID

    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.model import CanonicalMediaRecord, MediaLot, MediaSource
    from mediasync.domain.ports import MediaRepository, MediaUnitOfWorkFactory

log = getLogger(__name__)


class ResolutionStatus(StrEnum):
    EXISTING = "existing"
    MATCHED = "matched"
    NEW = "new"


@dataclass(slots=True, frozen=True)
class Resolution:
    internal_id: UUID
    status: ResolutionStatus
    score: float | None = None


class IdentityResolver:
    """Resolve ``(source, identifier, lot)`` to a stable internal id.

    Known identities resolve directly. Unknown ones are compared against stored
    records of the same lot in the same title bucket; a confident match attaches
    the identity to that record, a borderline one fails closed and anything else
    mints a new id. Every outcome except the failure is persisted before
    returning, so repeated calls are idempotent.

    Callers that go on to write the record must hold ``bucket_lock`` across
    resolution and the write.
    """

    def __init__(
        self,
        uow_factory: MediaUnitOfWorkFactory,
        config: SyncConfig | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self.config = config or SyncConfig()
        self._bucket_locks: KeyedLocks[tuple[MediaLot, str]] = KeyedLocks()

    def bucket_lock(self, lot: MediaLot, title: str) -> AbstractAsyncContextManager[None]:
        return self._bucket_locks.hold((lot, title_bucket(title)))

    def lookup(self, source: MediaSource, identifier: str, lot: MediaLot) -> UUID | None:
        with self._uow_factory() as uow:
            media = uow.repositories.media
            identity = media.get_provider_identity(IdentityKey(source, identifier, lot))
            if identity is None:
                return None
            return media.resolve_merged_id(identity.internal_id)

    def resolve(
        self,
        source: MediaSource,
        identifier: str,
        lot: MediaLot,
        record: NormalizedRecord | None = None,
    ) -> Resolution:
        key = IdentityKey(source, identifier, lot)
        with self._uow_factory() as uow:
            media = uow.repositories.media
            identity = media.get_provider_identity(key)
            if identity is not None:
                internal_id = media.resolve_merged_id(identity.internal_id)
                if internal_id != identity.internal_id:
                    identity.internal_id = internal_id
                    media.upsert_provider_identity(identity)
                    uow.commit()
                return Resolution(internal_id, ResolutionStatus.EXISTING)

            match = None
            if record is not None:
                match = choose_match(
                    self._score_candidates(media, source, record.title, record.publish_year, lot),
                    threshold=self.config.similarity_threshold,
                    margin=self.config.ambiguity_margin,
                )
            if match is not None:
                resolution = Resolution(match.internal_id, ResolutionStatus.MATCHED, match.score)
                log.info(
                    "Attaching %s to existing record %s (score %.3f)",
                    key,
                    match.internal_id,
                    match.score,
                )
            else:
                resolution = Resolution(new_id(), ResolutionStatus.NEW)
                log.info("Minted %s for %s", resolution.internal_id, key)

            media.upsert_provider_identity(
                ProviderIdentity(
                    source=source,
                    external_identifier=identifier,
                    lot=lot,
                    internal_id=resolution.internal_id,
                )
            )
            uow.commit()
            return resolution

    def find_duplicates(self, record: CanonicalMediaRecord) -> list[UUID]:
        """Ids of other records that would have matched ``record`` on resolution."""

        with self._uow_factory() as uow:
            media = uow.repositories.media
            sources = {identity.source for identity in media.list_provider_identities(record.id)}
            duplicates: list[UUID] = []
            for candidate in self._candidates(media, record.lot, record.title, record.publish_year):
                if candidate.id == record.id:
                    continue
                if self._shares_source(media, candidate.id, sources):
                    continue
                score = self._score(record.title, record.publish_year, candidate)
                if score is not None and score >= self.config.similarity_threshold:
                    duplicates.append(candidate.id)
            return duplicates

    def _score_candidates(
        self,
        media: MediaRepository,
        source: MediaSource,
        title: str,
        year: int | None,
        lot: MediaLot,
    ) -> list[MatchScore]:
        scores: list[MatchScore] = []
        for candidate in self._candidates(media, lot, title, year):
            # A source never describes one item under two identifiers.
            if self._shares_source(media, candidate.id, {source}):
                continue
            score = self._score(title, year, candidate)
            if score is not None:
                scores.append(MatchScore(candidate.id, score))
        return scores

    def _candidates(
        self,
        media: MediaRepository,
        lot: MediaLot,
        title: str,
        year: int | None,
    ) -> list[CanonicalMediaRecord]:
        bucket = title_bucket(title)
        if not bucket:
            return []
        return media.find_canonical_by_title_year_lot(
            lot, bucket, year, year_tolerance=self.config.year_tolerance
        )

    def _score(
        self, title: str, year: int | None, candidate: CanonicalMediaRecord
    ) -> float | None:
        return score_candidate(
            title,
            year,
            candidate.title,
            candidate.publish_year,
            year_tolerance=self.config.year_tolerance,
            missing_year_penalty=self.config.missing_year_penalty,
        )

    @staticmethod
    def _shares_source(
        media: MediaRepository, internal_id: UUID, sources: set[MediaSource]
    ) -> bool:
        return any(
            identity.source in sources for identity in media.list_provider_identities(internal_id)
        )
