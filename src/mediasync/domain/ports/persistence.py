"""Ports for persisting canonical media and sync bookkeeping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from mediasync.domain.model import (
        CanonicalMediaRecord,
        IdentityKey,
        MediaLot,
        MediaMerge,
        MediaSource,
        ProviderIdentity,
        Suggestion,
        SyncFailure,
    )


@runtime_checkable
class MediaRepository(Protocol):
    """Persistence contract for canonical records and their identities."""

    def upsert_canonical(self, record: CanonicalMediaRecord) -> None: ...

    def get_canonical(self, internal_id: UUID) -> CanonicalMediaRecord | None: ...

    def delete_canonical(self, internal_id: UUID) -> None: ...

    def upsert_provider_identity(self, identity: ProviderIdentity) -> None: ...

    def get_provider_identity(self, key: IdentityKey) -> ProviderIdentity | None: ...

    def list_provider_identities(self, internal_id: UUID) -> list[ProviderIdentity]: ...

    def find_canonical_by_title_year_lot(
        self,
        lot: MediaLot,
        title_prefix: str,
        year: int | None,
        *,
        year_tolerance: int,
    ) -> list[CanonicalMediaRecord]:
        """Candidates of ``lot`` whose normalized title starts with ``title_prefix``.

        Records without a year are always included; records with a year outside
        ``year ± year_tolerance`` are not.
        """
        ...

    def list_stale_identities(
        self,
        sources: Iterable[MediaSource],
        synced_before: datetime,
        *,
        limit: int,
    ) -> list[ProviderIdentity]: ...

    def mark_identity_synced(self, key: IdentityKey, synced_at: datetime) -> None: ...

    def replace_suggestions(self, internal_id: UUID, suggestions: Iterable[Suggestion]) -> None: ...

    def list_suggestions(self, internal_id: UUID) -> list[Suggestion]: ...

    def record_merge(self, merge: MediaMerge) -> None: ...

    def resolve_merged_id(self, internal_id: UUID) -> UUID:
        """Follow merge redirects to the surviving record id."""
        ...


@runtime_checkable
class SyncFailureRepository(Protocol):
    def add(self, failure: SyncFailure) -> None: ...

    def list_recent(self, *, limit: int = 50) -> list[SyncFailure]: ...
