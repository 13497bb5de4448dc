"""Canonical store writer: transactional, merge-not-overwrite upserts."""

from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from mediasync.domain.errors import StoreError
from mediasync.domain.locks import KeyedLocks
from mediasync.domain.media_updates import fill_gaps, merge_into, new_canonical
from mediasync.domain.model import IdentityKey, MediaMerge, ProviderIdentity, utcnow

if TYPE_CHECKING:
    from uuid import UUID

    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.model import Suggestion
    from mediasync.domain.ports import MediaRepository, MediaUnitOfWorkFactory

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CommitResult:
    internal_id: UUID
    created: bool
    changed_fields: frozenset[str]
    suggestion_count: int


class CanonicalStoreWriter:
    """Single writer of canonical records.

    Commits for one internal id are serialized; different ids commit in
    parallel. Each call is one unit of work.
    """

    def __init__(self, uow_factory: MediaUnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory
        self._locks: KeyedLocks[UUID] = KeyedLocks()

    async def upsert(
        self,
        internal_id: UUID,
        record: NormalizedRecord,
        *,
        identity: IdentityKey | None = None,
    ) -> CommitResult:
        key = identity or IdentityKey(record.source, record.identifier, record.lot)
        async with self._locks.hold(internal_id):
            return self._upsert(internal_id, record, key)

    async def merge_duplicate(self, survivor_id: UUID, duplicate_id: UUID) -> bool:
        """Fold ``duplicate_id`` into ``survivor_id`` and leave a redirect behind."""

        if survivor_id == duplicate_id:
            return False
        async with AsyncExitStack() as stack:
            for internal_id in sorted((survivor_id, duplicate_id), key=str):
                await stack.enter_async_context(self._locks.hold(internal_id))
            return self._merge(survivor_id, duplicate_id)

    def _upsert(
        self, internal_id: UUID, record: NormalizedRecord, key: IdentityKey
    ) -> CommitResult:
        with self._uow_factory() as uow:
            media = uow.repositories.media
            existing = media.get_canonical(internal_id)
            if existing is None:
                canonical = new_canonical(internal_id, record)
                changed: frozenset[str] = frozenset()
            else:
                canonical = existing
                changed = frozenset(merge_into(existing, record))
            media.upsert_canonical(canonical)

            suggestions = [self._link_suggestion(media, item) for item in record.suggestions]
            media.replace_suggestions(internal_id, suggestions)

            synced_at = utcnow()
            current = media.get_provider_identity(key)
            if current is None:
                media.upsert_provider_identity(
                    ProviderIdentity(
                        source=key.source,
                        external_identifier=key.external_identifier,
                        lot=key.lot,
                        internal_id=internal_id,
                        last_synced_at=synced_at,
                    )
                )
            elif media.resolve_merged_id(current.internal_id) != internal_id:
                raise StoreError(
                    StoreError.Kind.CONFLICT_ON_COMMIT,
                    f"{key} is bound to {current.internal_id}, not {internal_id}",
                )
            else:
                media.mark_identity_synced(key, synced_at)
            uow.commit()

        log.debug(
            "Committed %s (%s)",
            internal_id,
            "created" if existing is None else ", ".join(sorted(changed)) or "unchanged",
        )
        return CommitResult(
            internal_id=internal_id,
            created=existing is None,
            changed_fields=changed,
            suggestion_count=len(suggestions),
        )

    def _merge(self, survivor_id: UUID, duplicate_id: UUID) -> bool:
        with self._uow_factory() as uow:
            media = uow.repositories.media
            survivor = media.get_canonical(survivor_id)
            duplicate = media.get_canonical(duplicate_id)
            if survivor is None or duplicate is None:
                return False
            if survivor.lot is not duplicate.lot:
                raise ValueError("Cannot merge records of different lots")

            fill_gaps(survivor, duplicate)
            for identity in media.list_provider_identities(duplicate_id):
                identity.internal_id = survivor_id
                media.upsert_provider_identity(identity)
            media.replace_suggestions(duplicate_id, [])
            media.delete_canonical(duplicate_id)
            media.upsert_canonical(survivor)
            media.record_merge(MediaMerge(merged_id=duplicate_id, survivor_id=survivor_id))
            uow.commit()

        log.info("Merged duplicate record %s into %s", duplicate_id, survivor_id)
        return True

    @staticmethod
    def _link_suggestion(media: MediaRepository, suggestion: Suggestion) -> Suggestion:
        if suggestion.metadata_id is not None:
            return suggestion
        known = media.get_provider_identity(
            IdentityKey(suggestion.source, suggestion.identifier, suggestion.lot)
        )
        if known is None:
            return suggestion
        return replace(suggestion, metadata_id=media.resolve_merged_id(known.internal_id))
