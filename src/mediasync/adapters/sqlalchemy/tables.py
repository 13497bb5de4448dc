"""SQLAlchemy Core tables for canonical media and sync bookkeeping."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)

from mediasync.domain.model import (
    CreatorGroup,
    JobKind,
    MediaAssets,
    MediaGroup,
    MediaLot,
    MediaSource,
)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class PydanticJSON(TypeDecorator[Any]):
    """Text column holding a value serialised through a pydantic ``TypeAdapter``."""

    impl = Text
    cache_ok = True

    def __init__(self, model: Any) -> None:
        super().__init__()
        self.model = model
        self._adapter: TypeAdapter[Any] = TypeAdapter(model)

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return self._adapter.dump_json(value).decode("utf-8")

    def process_result_value(self, value: str | None, dialect: Dialect) -> Any:
        _ = dialect
        if value is None:
            return None
        return self._adapter.validate_json(value)


def _enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(enum_cls, native_enum=False, values_callable=lambda cls: [m.value for m in cls])


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

metadata_record_table = Table(
    "metadata_record",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("lot", _enum(MediaLot), nullable=False),
    Column("source", _enum(MediaSource), nullable=False),
    Column("identifier", String, nullable=False),
    Column("title", String, nullable=False),
    Column("normalized_title", String, nullable=False),
    Column("title_bucket", String, nullable=False),
    Column("description", Text),
    Column("source_url", String),
    Column("provider_rating", Float),
    Column("publish_year", Integer),
    Column("publish_date", Date),
    Column("is_nsfw", Boolean),
    Column("genres", PydanticJSON(list[str]), nullable=False),
    Column("creators", PydanticJSON(list[CreatorGroup]), nullable=False),
    Column("assets", PydanticJSON(MediaAssets), nullable=False),
    Column("media_group", PydanticJSON(MediaGroup)),
    # Shape depends on ``lot``; decoded by the repository.
    Column("specifics", JSON, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    Index("ix_metadata_record_lot_bucket", "lot", "title_bucket"),
)

# No foreign key to metadata_record: identities are written before the record
# they point at and are re-pointed when records merge.
provider_identity_table = Table(
    "provider_identity",
    metadata,
    Column("source", _enum(MediaSource), primary_key=True),
    Column("external_identifier", String, primary_key=True),
    Column("lot", _enum(MediaLot), primary_key=True),
    Column("internal_id", UUIDColumnType, nullable=False, index=True),
    Column("created_at", UTCDateTime, nullable=False),
    Column("last_synced_at", UTCDateTime),
)

suggestion_table = Table(
    "suggestion",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", UUIDColumnType, nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("lot", _enum(MediaLot), nullable=False),
    Column("source", _enum(MediaSource), nullable=False),
    Column("identifier", String, nullable=False),
    Column("title", String, nullable=False),
    Column("image", String),
    Column("metadata_id", UUIDColumnType),
    UniqueConstraint("owner_id", "source", "lot", "identifier"),
)

metadata_merge_table = Table(
    "metadata_merge",
    metadata,
    Column("merged_id", UUIDColumnType, primary_key=True),
    Column("survivor_id", UUIDColumnType, nullable=False, index=True),
    Column("merged_at", UTCDateTime, nullable=False),
)

sync_failure_table = Table(
    "sync_failure",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("target_key", String, nullable=False, index=True),
    Column("kind", _enum(JobKind), nullable=False),
    Column("attempts", Integer, nullable=False),
    Column("error_type", String, nullable=False),
    Column("error_kind", String),
    Column("message", Text, nullable=False),
    Column("failed_at", UTCDateTime, nullable=False, index=True),
)
