"""Canonical media records and the identities pointing at them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime  # noqa: TC003
from uuid import UUID  # noqa: TC003

from .entity import new_id, utcnow
from .enums import MediaLot, MediaSource, VideoSource
from .specifics import TypeSpecifics, empty_specifics, ensure_specifics_match


@dataclass(slots=True)
class CreatorCredit:
    name: str
    image: str | None = None
    person_id: str | None = None


@dataclass(slots=True)
class CreatorGroup:
    """Creators sharing a role, e.g. ``Director`` or ``Author``."""

    name: str
    items: list[CreatorCredit] = field(default_factory=list["CreatorCredit"])


@dataclass(slots=True)
class MediaVideo:
    video_id: str
    source: VideoSource


@dataclass(slots=True)
class MediaAssets:
    images: list[str] = field(default_factory=list[str])
    videos: list[MediaVideo] = field(default_factory=list["MediaVideo"])

    def is_empty(self) -> bool:
        return not self.images and not self.videos


@dataclass(slots=True)
class MediaGroup:
    """Collection/franchise the item belongs to, e.g. a movie collection."""

    identifier: str
    name: str
    part: int | None = None


@dataclass(slots=True)
class Suggestion:
    """Cross-reference to related media, regenerated on every sync."""

    lot: MediaLot
    source: MediaSource
    identifier: str
    title: str
    image: str | None = None
    metadata_id: UUID | None = None


@dataclass(slots=True, frozen=True)
class IdentityKey:
    source: MediaSource
    external_identifier: str
    lot: MediaLot

    def __str__(self) -> str:
        return f"{self.source}:{self.lot}:{self.external_identifier}"


@dataclass(slots=True)
class ProviderIdentity:
    """(source, external identifier, lot) -> internal id."""

    source: MediaSource
    external_identifier: str
    lot: MediaLot
    internal_id: UUID
    created_at: datetime = field(default_factory=utcnow)
    last_synced_at: datetime | None = None

    @property
    def key(self) -> IdentityKey:
        return IdentityKey(self.source, self.external_identifier, self.lot)


@dataclass(eq=False, kw_only=True)
class CanonicalMediaRecord:
    """Deduplicated, merged representation of one media item.

    ``source``/``identifier`` name the provider identity that first produced the
    record; every other identity is tracked as a ``ProviderIdentity``.
    """

    id: UUID = field(default_factory=new_id)
    lot: MediaLot
    source: MediaSource
    identifier: str
    title: str
    description: str | None = None
    source_url: str | None = None
    provider_rating: float | None = None
    publish_year: int | None = None
    publish_date: date | None = None
    is_nsfw: bool | None = None
    genres: set[str] = field(default_factory=set[str])
    creators: list[CreatorGroup] = field(default_factory=list["CreatorGroup"])
    assets: MediaAssets = field(default_factory=MediaAssets)
    group: MediaGroup | None = None
    specifics: TypeSpecifics | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.specifics is None:
            self.specifics = empty_specifics(self.lot)
        ensure_specifics_match(self.lot, self.specifics)

    @property
    def type_specifics(self) -> TypeSpecifics:
        if self.specifics is None:
            raise ValueError("record has no specifics")
        return self.specifics


@dataclass(slots=True, frozen=True)
class MediaMerge:
    """Redirect left behind when a duplicate record is folded into a survivor."""

    merged_id: UUID
    survivor_id: UUID
    merged_at: datetime = field(default_factory=utcnow)
