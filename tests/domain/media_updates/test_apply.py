from __future__ import annotations

from datetime import date

import pytest

from mediasync.domain.media_updates import fill_gaps, merge_into, new_canonical
from mediasync.domain.model import (
    CreatorCredit,
    CreatorGroup,
    MangaSpecifics,
    MediaAssets,
    MediaLot,
    MediaVideo,
    MovieSpecifics,
    VideoSource,
    new_id,
)
from tests.helpers.records import make_canonical, make_normalized


def test_new_canonical_copies_every_field() -> None:
    internal_id = new_id()
    update = make_normalized(
        description="Neo wakes up.",
        genres={"Action"},
        publish_date=date(1999, 3, 30),
        specifics=MovieSpecifics(runtime=136),
    )

    record = new_canonical(internal_id, update)

    assert record.id == internal_id
    assert record.description == "Neo wakes up."
    assert record.genres == {"Action"}
    assert record.publish_year == 1999
    assert record.assets == MediaAssets()
    assert record.specifics == MovieSpecifics(runtime=136)


def test_absent_fields_keep_stored_values() -> None:
    record = make_canonical(
        description="Stored synopsis",
        provider_rating=8.0,
        genres={"Action"},
        creators=[CreatorGroup("Director", [CreatorCredit("Lana Wachowski")])],
        specifics=MovieSpecifics(runtime=136),
    )
    before = record.updated_at

    changed = merge_into(record, make_normalized(provider_rating=8.2))

    assert changed == {"provider_rating"}
    assert record.description == "Stored synopsis"
    assert record.provider_rating == 8.2
    assert record.genres == {"Action"}
    assert record.creators[0].name == "Director"
    assert record.specifics == MovieSpecifics(runtime=136)
    assert record.updated_at >= before


def test_present_fields_overwrite() -> None:
    record = make_canonical(description="Old", genres={"Action"})

    changed = merge_into(
        record,
        make_normalized("The Matrix (1999)", description="New", genres={"Sci-Fi", "Action"}),
    )

    assert changed == {"title", "description", "genres"}
    assert record.title == "The Matrix (1999)"
    assert record.genres == {"Sci-Fi", "Action"}


def test_unchanged_update_reports_nothing() -> None:
    record = make_canonical(description="Same")
    before = record.updated_at

    assert merge_into(record, make_normalized(description="Same")) == set()
    assert record.updated_at == before


def test_assets_merge_per_list() -> None:
    trailer = MediaVideo(video_id="abc", source=VideoSource.YOUTUBE)
    record = make_canonical(assets=MediaAssets(images=["old.jpg"], videos=[trailer]))

    merge_into(record, make_normalized(assets=MediaAssets(images=["new.jpg"])))

    assert record.assets == MediaAssets(images=["new.jpg"], videos=[trailer])


def test_lot_mismatch_is_rejected() -> None:
    record = make_canonical()

    with pytest.raises(ValueError, match="manga"):
        merge_into(record, make_normalized(lot=MediaLot.MANGA))


def test_specifics_merge_field_by_field() -> None:
    record = make_canonical(
        lot=MediaLot.MANGA, specifics=MangaSpecifics(volumes=10, chapters=100)
    )

    changed = merge_into(
        record, make_normalized(lot=MediaLot.MANGA, specifics=MangaSpecifics(chapters=105))
    )

    assert changed == {"specifics"}
    assert record.specifics == MangaSpecifics(volumes=10, chapters=105)


def test_fill_gaps_only_copies_missing_values() -> None:
    survivor = make_canonical(description="Kept", provider_rating=None)
    duplicate = make_canonical(
        description="Dropped",
        provider_rating=7.5,
        genres={"Action"},
        assets=MediaAssets(images=["poster.jpg"]),
        specifics=MovieSpecifics(runtime=136),
    )

    changed = fill_gaps(survivor, duplicate)

    assert changed == {"provider_rating", "genres", "assets", "specifics"}
    assert survivor.description == "Kept"
    assert survivor.provider_rating == 7.5
    assert survivor.assets.images == ["poster.jpg"]
    assert survivor.specifics == MovieSpecifics(runtime=136)


def test_fill_gaps_with_nothing_to_add() -> None:
    survivor = make_canonical(description="Kept")

    assert fill_gaps(survivor, make_canonical()) == set()
