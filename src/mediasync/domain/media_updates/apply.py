"""Apply normalized records to canonical records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mediasync.domain.model import (
    CanonicalMediaRecord,
    MediaAssets,
    merge_specifics,
    utcnow,
)

if TYPE_CHECKING:
    from uuid import UUID

    from .dto import NormalizedRecord


def new_canonical(internal_id: UUID, update: NormalizedRecord) -> CanonicalMediaRecord:
    """Build the first canonical record for a freshly minted identity."""

    return CanonicalMediaRecord(
        id=internal_id,
        lot=update.lot,
        source=update.source,
        identifier=update.identifier,
        title=update.title,
        description=update.description,
        source_url=update.source_url,
        provider_rating=update.provider_rating,
        publish_year=update.publish_year,
        publish_date=update.publish_date,
        is_nsfw=update.is_nsfw,
        genres=set(update.genres),
        creators=list(update.creators),
        assets=update.assets or MediaAssets(),
        group=update.group,
        specifics=update.specifics,
    )


def merge_into(record: CanonicalMediaRecord, update: NormalizedRecord) -> set[str]:
    """Merge ``update`` into ``record`` in place and return the changed field names.

    Present values overwrite, absent values keep what is stored.
    """

    if update.lot is not record.lot:
        raise ValueError(
            f"Cannot merge a {update.lot.value} record into a {record.lot.value} record"
        )
    changed: set[str] = set()

    def assign(name: str, value: object) -> None:
        if getattr(record, name) != value:
            setattr(record, name, value)
            changed.add(name)

    if update.title:
        assign("title", update.title)
    for name in (
        "description",
        "source_url",
        "provider_rating",
        "publish_year",
        "publish_date",
        "is_nsfw",
        "group",
    ):
        value = getattr(update, name)
        if value is not None:
            assign(name, value)
    if update.genres:
        assign("genres", set(update.genres))
    if update.creators:
        assign("creators", list(update.creators))
    if update.assets is not None:
        assign("assets", _merge_assets(record.assets, update.assets))
    assign("specifics", merge_specifics(record.type_specifics, update.specifics))

    if changed:
        record.updated_at = utcnow()
    return changed


def fill_gaps(survivor: CanonicalMediaRecord, duplicate: CanonicalMediaRecord) -> set[str]:
    """Copy values the survivor lacks from a duplicate that is being merged away."""

    changed: set[str] = set()
    for name in (
        "description",
        "source_url",
        "provider_rating",
        "publish_year",
        "publish_date",
        "is_nsfw",
        "group",
    ):
        if getattr(survivor, name) is None and getattr(duplicate, name) is not None:
            setattr(survivor, name, getattr(duplicate, name))
            changed.add(name)
    if not survivor.genres and duplicate.genres:
        survivor.genres = set(duplicate.genres)
        changed.add("genres")
    if not survivor.creators and duplicate.creators:
        survivor.creators = list(duplicate.creators)
        changed.add("creators")
    merged_assets = _merge_assets(duplicate.assets, survivor.assets)
    if merged_assets != survivor.assets:
        survivor.assets = merged_assets
        changed.add("assets")
    merged_specifics = merge_specifics(duplicate.type_specifics, survivor.type_specifics)
    if merged_specifics != survivor.specifics:
        survivor.specifics = merged_specifics
        changed.add("specifics")
    if changed:
        survivor.updated_at = utcnow()
    return changed


def _merge_assets(current: MediaAssets, update: MediaAssets) -> MediaAssets:
    return MediaAssets(
        images=list(update.images) if update.images else list(current.images),
        videos=list(update.videos) if update.videos else list(current.videos),
    )
