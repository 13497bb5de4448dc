from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from mediasync.adapters.itunes import ITunesProvider, translate_podcast
from mediasync.config import ITunesConfig, ResilienceConfig
from mediasync.config.itunes import DEFAULT_ITUNES_BASE_URL
from mediasync.domain.errors import AdapterError, FetchError
from mediasync.domain.model import MediaLot, MediaSource, PodcastSpecifics
from mediasync.domain.ports import RawPayload, RequestShape
from tests.helpers.data import load_fixture
from tests.helpers.http import json_response, make_client_factory

SHAPE = RequestShape(MediaLot.PODCAST)


@pytest.fixture
def lookup() -> RawPayload:
    return load_fixture("itunes/lookup_1200361736.json")


def _provider(payload: RawPayload, seen: list[httpx.Request]) -> ITunesProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(payload)

    config = ITunesConfig(
        resilience=ResilienceConfig(name="itunes", base_url=DEFAULT_ITUNES_BASE_URL, cache=None),
        episode_limit=50,
    )
    return ITunesProvider(config=config, client_factory=make_client_factory(handler))


def test_translate_podcast(lookup: RawPayload) -> None:
    record = translate_podcast(lookup)

    assert record.source is MediaSource.ITUNES
    assert record.identifier == "1200361736"
    assert record.title == "The Daily"
    assert record.publish_date == date(2024, 5, 2)
    assert record.publish_year == 2024
    assert record.is_nsfw is False
    assert record.genres == {"Daily News", "News"}
    assert [group.name for group in record.creators] == ["Creator"]
    assert record.creators[0].items[0].name == "The New York Times"
    assert record.assets is not None
    assert record.assets.images[0].endswith("600x600bb.jpg")


def test_translate_podcast_episodes_newest_first(lookup: RawPayload) -> None:
    specifics = translate_podcast(lookup).specifics

    assert isinstance(specifics, PodcastSpecifics)
    assert specifics.total_episodes == 2300
    newest, older = specifics.episodes
    assert (newest.number, newest.title) == (2, "The Election Rematch")
    assert newest.runtime == 30
    assert newest.overview == "Voters are weighing a familiar choice."
    assert newest.thumbnail is not None
    assert newest.thumbnail.endswith("160x160bb.jpg")
    assert (older.number, older.overview) == (1, "Students set up tents.")
    assert older.runtime is None
    assert older.thumbnail is not None
    assert older.thumbnail.endswith("episode600.jpg")


def test_explicit_podcast_is_nsfw(lookup: RawPayload) -> None:
    lookup["results"][0]["contentAdvisoryRating"] = "Explicit"

    assert translate_podcast(lookup).is_nsfw is True


def test_lookup_of_a_song_is_malformed(lookup: RawPayload) -> None:
    lookup["results"][0]["kind"] = "song"

    with pytest.raises(AdapterError) as excinfo:
        translate_podcast(lookup)

    assert excinfo.value.kind is AdapterError.Kind.MALFORMED_PAYLOAD


def test_lookup_with_only_episodes_is_malformed(lookup: RawPayload) -> None:
    lookup["results"] = lookup["results"][1:]

    with pytest.raises(AdapterError):
        translate_podcast(lookup)


def test_fetch_sends_lookup_params(lookup: RawPayload) -> None:
    seen: list[httpx.Request] = []

    raw = asyncio.run(_provider(lookup, seen).fetch_raw("1200361736", SHAPE))

    assert raw["resultCount"] == 3
    params = seen[0].url.params
    assert seen[0].url.path == "/lookup"
    assert params["id"] == "1200361736"
    assert params["entity"] == "podcastEpisode"
    assert params["limit"] == "50"


def test_empty_lookup_is_not_found() -> None:
    provider = _provider({"resultCount": 0, "results": []}, [])

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(provider.fetch_raw("1", SHAPE))

    assert excinfo.value.kind is FetchError.Kind.NOT_FOUND
