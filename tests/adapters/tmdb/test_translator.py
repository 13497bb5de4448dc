from __future__ import annotations

from datetime import date

import pytest

from mediasync.adapters.tmdb import translate_movie, translate_show
from mediasync.domain.errors import AdapterError
from mediasync.domain.model import (
    MediaGroup,
    MediaLot,
    MediaSource,
    MediaVideo,
    MovieSpecifics,
    ShowSpecifics,
    VideoSource,
)
from mediasync.domain.ports import RawPayload

IMAGES = "https://image.tmdb.org/t/p/original"


def test_translate_movie_core_fields(movie_payload: RawPayload) -> None:
    record = translate_movie(movie_payload)

    assert record.source is MediaSource.TMDB
    assert record.identifier == "603"
    assert record.lot is MediaLot.MOVIE
    assert record.title == "The Matrix"
    assert record.specifics == MovieSpecifics(runtime=136)
    assert record.publish_date == date(1999, 3, 30)
    assert record.publish_year == 1999
    assert record.provider_rating == 8.2
    assert record.is_nsfw is False
    assert record.genres == {"Action", "Science Fiction"}
    assert record.source_url == "https://www.themoviedb.org/movie/603"
    assert record.group == MediaGroup(identifier="2344", name="The Matrix Collection")


def test_translate_movie_groups_crew_and_cast(movie_payload: RawPayload) -> None:
    record = translate_movie(movie_payload)

    groups = {group.name: group.items for group in record.creators}
    assert [group.name for group in record.creators] == [
        "Director",
        "Original Music Composer",
        "Actor",
        "Production Company",
    ]
    assert [credit.name for credit in groups["Director"]] == ["Lilly Wachowski", "Lana Wachowski"]
    assert groups["Director"][0].image is None
    assert groups["Director"][1].image == f"{IMAGES}/ca6FqWLf6XPm3eUKp6Wl7fpSW9y.jpg"
    # Cast is ordered by billing.
    assert [credit.name for credit in groups["Actor"]] == ["Keanu Reeves", "Laurence Fishburne"]
    assert groups["Actor"][0].person_id == "6384"
    assert "Special Effects Supervisor" not in groups


def test_translate_movie_assets_and_suggestions(movie_payload: RawPayload) -> None:
    record = translate_movie(movie_payload)

    assert record.assets is not None
    assert record.assets.images == [
        f"{IMAGES}/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
        f"{IMAGES}/fNG7i7RqMErkcqhohV2a6cV1Ehy.jpg",
    ]
    assert record.assets.videos == [MediaVideo(video_id="vKQi3bBA1y8", source=VideoSource.YOUTUBE)]
    assert [(item.identifier, item.title) for item in record.suggestions] == [
        ("604", "The Matrix Reloaded"),
        ("605", "The Matrix Revolutions"),
    ]
    assert record.suggestions[1].image is None
    assert all(item.lot is MediaLot.MOVIE for item in record.suggestions)


def test_translate_movie_uses_configured_image_base(movie_payload: RawPayload) -> None:
    record = translate_movie(movie_payload, image_base_url="https://cdn.example.test/w500/")

    assert record.assets is not None
    assert record.assets.images[0] == (
        "https://cdn.example.test/w500/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg"
    )


def test_translate_movie_without_votes_has_no_rating(movie_payload: RawPayload) -> None:
    movie_payload["vote_count"] = 0

    assert translate_movie(movie_payload).provider_rating is None


def test_translate_movie_rejects_show_payload(show_payload: RawPayload) -> None:
    with pytest.raises(AdapterError) as excinfo:
        translate_movie(show_payload)

    assert excinfo.value.kind is AdapterError.Kind.MALFORMED_PAYLOAD


def test_translate_movie_rejects_payload_without_id(movie_payload: RawPayload) -> None:
    del movie_payload["id"]

    with pytest.raises(AdapterError) as excinfo:
        translate_movie(movie_payload)

    assert excinfo.value.kind is AdapterError.Kind.MALFORMED_PAYLOAD


def test_translate_show_seasons_and_episodes(show_payload: RawPayload) -> None:
    record = translate_show(show_payload)

    assert record.lot is MediaLot.SHOW
    assert record.title == "Game of Thrones"
    assert record.publish_year == 2011
    assert isinstance(record.specifics, ShowSpecifics)
    seasons = record.specifics.seasons
    assert [season.season_number for season in seasons] == [0, 1]
    assert seasons[0].overview is None
    assert [episode.name for episode in seasons[1].episodes] == [
        "Winter Is Coming",
        "The Kingsroad",
    ]
    pilot = seasons[1].episodes[0]
    assert pilot.runtime == 62
    assert pilot.publish_date == date(2011, 4, 17)
    assert pilot.images == [f"{IMAGES}/9hGF3WUkBf7cSjMg0cdMDHJkByd.jpg"]
    assert seasons[1].episodes[1].images == []
    assert seasons[1].episodes[1].overview is None


def test_translate_show_puts_creators_first(show_payload: RawPayload) -> None:
    record = translate_show(show_payload)

    assert [group.name for group in record.creators] == ["Creator", "Actor", "Production Company"]
    assert [credit.name for credit in record.creators[0].items] == ["David Benioff", "D. B. Weiss"]
    assert record.suggestions[0].lot is MediaLot.SHOW
    assert record.suggestions[0].title == "The Walking Dead"


def test_translate_show_without_season_details_keeps_season_list(
    show_payload: RawPayload,
) -> None:
    show_payload["season_details"] = []

    record = translate_show(show_payload)

    assert isinstance(record.specifics, ShowSpecifics)
    assert [season.name for season in record.specifics.seasons] == ["Specials", "Season 1"]
    assert all(not season.episodes for season in record.specifics.seasons)


def test_translate_show_rejects_movie_payload(movie_payload: RawPayload) -> None:
    with pytest.raises(AdapterError):
        translate_show(movie_payload)
