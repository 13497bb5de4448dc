"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Any, Final

from pydantic import TypeAdapter
from sqlalchemy import delete, insert, or_, select, update

from mediasync.domain.identity import normalize_title, title_bucket
from mediasync.domain.identity.normalize import BUCKET_LENGTH
from mediasync.domain.model import (
    SPECIFICS_BY_LOT,
    CanonicalMediaRecord,
    MediaLot,
    ProviderIdentity,
    Suggestion,
    SyncFailure,
)

from .tables import (
    metadata_merge_table,
    metadata_record_table,
    provider_identity_table,
    suggestion_table,
    sync_failure_table,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import ColumnElement, Row
    from sqlalchemy.orm import Session

    from mediasync.domain.model import IdentityKey, MediaMerge, MediaSource, TypeSpecifics

MAX_MERGE_HOPS: Final[int] = 32


@cache
def _specifics_adapter(lot: MediaLot) -> TypeAdapter[Any]:
    return TypeAdapter(SPECIFICS_BY_LOT[lot])


def _identity_clause(key: IdentityKey) -> ColumnElement[bool]:
    columns = provider_identity_table.c
    return (
        (columns.source == key.source)
        & (columns.external_identifier == key.external_identifier)
        & (columns.lot == key.lot)
    )


class SqlAlchemyMediaRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_canonical(self, record: CanonicalMediaRecord) -> None:
        values = self._record_values(record)
        exists = self.session.execute(
            select(metadata_record_table.c.id).where(metadata_record_table.c.id == record.id)
        ).scalar_one_or_none()
        if exists is None:
            self.session.execute(insert(metadata_record_table).values(id=record.id, **values))
        else:
            self.session.execute(
                update(metadata_record_table)
                .where(metadata_record_table.c.id == record.id)
                .values(**values)
            )

    def get_canonical(self, internal_id: UUID) -> CanonicalMediaRecord | None:
        row = self.session.execute(
            select(metadata_record_table).where(metadata_record_table.c.id == internal_id)
        ).one_or_none()
        return self._to_record(row) if row is not None else None

    def delete_canonical(self, internal_id: UUID) -> None:
        self.session.execute(
            delete(metadata_record_table).where(metadata_record_table.c.id == internal_id)
        )
        self.session.execute(
            delete(suggestion_table).where(suggestion_table.c.owner_id == internal_id)
        )

    def upsert_provider_identity(self, identity: ProviderIdentity) -> None:
        key = identity.key
        exists = self.session.execute(
            select(provider_identity_table.c.internal_id).where(_identity_clause(key))
        ).one_or_none()
        if exists is None:
            self.session.execute(
                insert(provider_identity_table).values(
                    source=identity.source,
                    external_identifier=identity.external_identifier,
                    lot=identity.lot,
                    internal_id=identity.internal_id,
                    created_at=identity.created_at,
                    last_synced_at=identity.last_synced_at,
                )
            )
        else:
            self.session.execute(
                update(provider_identity_table)
                .where(_identity_clause(key))
                .values(internal_id=identity.internal_id, last_synced_at=identity.last_synced_at)
            )

    def get_provider_identity(self, key: IdentityKey) -> ProviderIdentity | None:
        row = self.session.execute(
            select(provider_identity_table).where(_identity_clause(key))
        ).one_or_none()
        return self._to_identity(row) if row is not None else None

    def list_provider_identities(self, internal_id: UUID) -> list[ProviderIdentity]:
        rows = self.session.execute(
            select(provider_identity_table)
            .where(provider_identity_table.c.internal_id == internal_id)
            .order_by(provider_identity_table.c.created_at)
        ).all()
        return [self._to_identity(row) for row in rows]

    def find_canonical_by_title_year_lot(
        self,
        lot: MediaLot,
        title_prefix: str,
        year: int | None,
        *,
        year_tolerance: int,
    ) -> list[CanonicalMediaRecord]:
        columns = metadata_record_table.c
        stmt = (
            select(metadata_record_table)
            .where(columns.lot == lot)
            .where(columns.title_bucket == title_prefix[:BUCKET_LENGTH])
            .where(columns.normalized_title.startswith(title_prefix, autoescape=True))
            .order_by(columns.created_at)
        )
        if year is not None:
            stmt = stmt.where(
                or_(
                    columns.publish_year.is_(None),
                    columns.publish_year.between(year - year_tolerance, year + year_tolerance),
                )
            )
        return [self._to_record(row) for row in self.session.execute(stmt).all()]

    def list_stale_identities(
        self,
        sources: Iterable[MediaSource],
        synced_before: datetime,
        *,
        limit: int,
    ) -> list[ProviderIdentity]:
        columns = provider_identity_table.c
        stmt = (
            select(provider_identity_table)
            .where(columns.source.in_(list(sources)))
            .where(or_(columns.last_synced_at.is_(None), columns.last_synced_at < synced_before))
            .order_by(columns.last_synced_at.is_not(None), columns.last_synced_at)
            .limit(limit)
        )
        return [self._to_identity(row) for row in self.session.execute(stmt).all()]

    def mark_identity_synced(self, key: IdentityKey, synced_at: datetime) -> None:
        self.session.execute(
            update(provider_identity_table)
            .where(_identity_clause(key))
            .values(last_synced_at=synced_at)
        )

    def replace_suggestions(self, internal_id: UUID, suggestions: Iterable[Suggestion]) -> None:
        self.session.execute(
            delete(suggestion_table).where(suggestion_table.c.owner_id == internal_id)
        )
        seen: set[tuple[str, str, str]] = set()
        rows: list[dict[str, object]] = []
        for suggestion in suggestions:
            marker = (suggestion.source, suggestion.lot, suggestion.identifier)
            if marker in seen:
                continue
            seen.add(marker)
            rows.append(
                {
                    "owner_id": internal_id,
                    "position": len(rows),
                    "lot": suggestion.lot,
                    "source": suggestion.source,
                    "identifier": suggestion.identifier,
                    "title": suggestion.title,
                    "image": suggestion.image,
                    "metadata_id": suggestion.metadata_id,
                }
            )
        if rows:
            self.session.execute(insert(suggestion_table), rows)

    def list_suggestions(self, internal_id: UUID) -> list[Suggestion]:
        rows = self.session.execute(
            select(suggestion_table)
            .where(suggestion_table.c.owner_id == internal_id)
            .order_by(suggestion_table.c.position)
        ).all()
        return [
            Suggestion(
                lot=row.lot,
                source=row.source,
                identifier=row.identifier,
                title=row.title,
                image=row.image,
                metadata_id=row.metadata_id,
            )
            for row in rows
        ]

    def record_merge(self, merge: MediaMerge) -> None:
        columns = metadata_merge_table.c
        # Earlier redirects to the merged record now lead to the survivor.
        self.session.execute(
            update(metadata_merge_table)
            .where(columns.survivor_id == merge.merged_id)
            .values(survivor_id=merge.survivor_id)
        )
        self.session.execute(
            delete(metadata_merge_table).where(columns.merged_id == merge.merged_id)
        )
        self.session.execute(
            insert(metadata_merge_table).values(
                merged_id=merge.merged_id,
                survivor_id=merge.survivor_id,
                merged_at=merge.merged_at,
            )
        )

    def resolve_merged_id(self, internal_id: UUID) -> UUID:
        current = internal_id
        for _ in range(MAX_MERGE_HOPS):
            survivor = self.session.execute(
                select(metadata_merge_table.c.survivor_id).where(
                    metadata_merge_table.c.merged_id == current
                )
            ).scalar_one_or_none()
            if survivor is None or survivor == current:
                return current
            current = survivor
        return current

    @staticmethod
    def _record_values(record: CanonicalMediaRecord) -> dict[str, object]:
        specifics: TypeSpecifics = record.type_specifics
        return {
            "lot": record.lot,
            "source": record.source,
            "identifier": record.identifier,
            "title": record.title,
            "normalized_title": normalize_title(record.title),
            "title_bucket": title_bucket(record.title),
            "description": record.description,
            "source_url": record.source_url,
            "provider_rating": record.provider_rating,
            "publish_year": record.publish_year,
            "publish_date": record.publish_date,
            "is_nsfw": record.is_nsfw,
            "genres": sorted(record.genres),
            "creators": record.creators,
            "assets": record.assets,
            "media_group": record.group,
            "specifics": _specifics_adapter(record.lot).dump_python(specifics, mode="json"),
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }

    @staticmethod
    def _to_record(row: Row[Any]) -> CanonicalMediaRecord:
        lot = MediaLot(row.lot)
        return CanonicalMediaRecord(
            id=row.id,
            lot=lot,
            source=row.source,
            identifier=row.identifier,
            title=row.title,
            description=row.description,
            source_url=row.source_url,
            provider_rating=row.provider_rating,
            publish_year=row.publish_year,
            publish_date=row.publish_date,
            is_nsfw=row.is_nsfw,
            genres=set(row.genres),
            creators=row.creators,
            assets=row.assets,
            group=row.media_group,
            specifics=_specifics_adapter(lot).validate_python(row.specifics),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_identity(row: Row[Any]) -> ProviderIdentity:
        return ProviderIdentity(
            source=row.source,
            external_identifier=row.external_identifier,
            lot=row.lot,
            internal_id=row.internal_id,
            created_at=row.created_at,
            last_synced_at=row.last_synced_at,
        )


class SqlAlchemySyncFailureRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, failure: SyncFailure) -> None:
        self.session.execute(
            insert(sync_failure_table).values(
                id=failure.id,
                target_key=failure.target_key,
                kind=failure.kind,
                attempts=failure.attempts,
                error_type=failure.error_type,
                error_kind=failure.error_kind,
                message=failure.message,
                failed_at=failure.failed_at,
            )
        )

    def list_recent(self, *, limit: int = 50) -> list[SyncFailure]:
        rows = self.session.execute(
            select(sync_failure_table).order_by(sync_failure_table.c.failed_at.desc()).limit(limit)
        ).all()
        return [
            SyncFailure(
                id=row.id,
                target_key=row.target_key,
                kind=row.kind,
                attempts=row.attempts,
                error_type=row.error_type,
                error_kind=row.error_kind,
                message=row.message,
                failed_at=row.failed_at,
            )
            for row in rows
        ]


if TYPE_CHECKING:
    from typing import cast

    from mediasync.domain.ports import MediaRepository, SyncFailureRepository

    _session_stub = cast("Session", object())
    _media_repo_check: MediaRepository = SqlAlchemyMediaRepository(_session_stub)
    _failure_repo_check: SyncFailureRepository = SqlAlchemySyncFailureRepository(_session_stub)
