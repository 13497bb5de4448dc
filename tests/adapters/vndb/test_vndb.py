from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from mediasync.adapters.vndb import VndbProvider, translate_visual_novel, vn_id
from mediasync.config import ResilienceConfig, VndbConfig
from mediasync.config.vndb import DEFAULT_VNDB_BASE_URL
from mediasync.domain.errors import AdapterError, FetchError
from mediasync.domain.model import MediaLot, VisualNovelSpecifics
from mediasync.domain.ports import RawPayload, RequestShape
from tests.helpers.http import json_response, make_client_factory, request_json

SHAPE = RequestShape(MediaLot.VISUAL_NOVEL)


@pytest.fixture
def novel() -> RawPayload:
    return {
        "id": "v17",
        "title": "Ever17 -the out of infinity-",
        "alttitle": "Ever17",
        "description": (
            "Set in [url=/p123]LeMU[/url], an underwater theme park.\n"
            "[spoiler]Nothing is what it seems.[/spoiler]"
        ),
        "released": "2002-08-29",
        "rating": 87.6,
        "length_minutes": 2400,
        "platforms": ["win", "ps2"],
        "image": {"url": "https://t.vndb.org/cv/55/8655.jpg", "sexual": 0.0},
        "screenshots": [
            {"url": "https://t.vndb.org/sf/10/9810.jpg", "sexual": 0.0},
            {"url": "https://t.vndb.org/cv/55/8655.jpg", "sexual": 0.0},
        ],
        "developers": [{"id": "p123", "name": "KID"}, {"id": "p123", "name": "KID"}],
        "tags": [
            {"id": "g1", "name": "Mystery", "rating": 2.4, "spoiler": 0},
            {"id": "g2", "name": "Time Travel", "rating": 2.9, "spoiler": 0},
            {"id": "g3", "name": "Twist Ending", "rating": 3.0, "spoiler": 2},
        ],
    }


def _provider(payload: object, seen: list[httpx.Request]) -> VndbProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(payload)

    config = VndbConfig(
        resilience=ResilienceConfig(name="vndb", base_url=DEFAULT_VNDB_BASE_URL, cache=None)
    )
    return VndbProvider(config=config, client_factory=make_client_factory(handler))


def test_translate_visual_novel(novel: RawPayload) -> None:
    record = translate_visual_novel(novel)

    assert record.identifier == "v17"
    assert record.lot is MediaLot.VISUAL_NOVEL
    assert record.title == "Ever17 -the out of infinity-"
    assert record.source_url == "https://vndb.org/v17"
    assert record.specifics == VisualNovelSpecifics(length=2400)
    assert record.provider_rating == 87.6
    assert record.publish_date == date(2002, 8, 29)
    assert record.is_nsfw is False
    assert [credit.name for credit in record.creators[0].items] == ["KID"]
    assert record.assets is not None
    assert len(record.assets.images) == 2


def test_translate_strips_inline_markup(novel: RawPayload) -> None:
    description = translate_visual_novel(novel).description

    assert description == (
        "Set in LeMU, an underwater theme park.\nNothing is what it seems."
    )


def test_spoiler_tags_are_not_genres(novel: RawPayload) -> None:
    assert translate_visual_novel(novel).genres == {"Mystery", "Time Travel"}


def test_explicit_cover_marks_nsfw(novel: RawPayload) -> None:
    novel["image"]["sexual"] = 2.0

    assert translate_visual_novel(novel).is_nsfw is True


def test_missing_image_leaves_nsfw_unknown(novel: RawPayload) -> None:
    novel["image"] = None

    assert translate_visual_novel(novel).is_nsfw is None


def test_translate_rejects_entry_without_title(novel: RawPayload) -> None:
    novel["title"] = ""

    with pytest.raises(AdapterError):
        translate_visual_novel(novel)


@pytest.mark.parametrize(
    ("identifier", "expected"), [("17", "v17"), ("v17", "v17"), (" V9 ", "v9")]
)
def test_vn_id_normalizes(identifier: str, expected: str) -> None:
    assert vn_id(identifier) == expected


def test_vn_id_rejects_other_entries() -> None:
    with pytest.raises(FetchError) as excinfo:
        vn_id("r17")

    assert excinfo.value.kind is FetchError.Kind.INVALID_IDENTIFIER


def test_fetch_filters_by_id(novel: RawPayload) -> None:
    seen: list[httpx.Request] = []

    raw = asyncio.run(_provider({"results": [novel], "more": False}, seen).fetch_raw("17", SHAPE))

    assert raw["id"] == "v17"
    assert seen[0].url.path == "/kana/vn"
    body = request_json(seen[0])
    assert isinstance(body, dict)
    assert body["filters"] == ["id", "=", "v17"]


def test_fetch_without_results_is_not_found() -> None:
    with pytest.raises(FetchError) as excinfo:
        asyncio.run(_provider({"results": [], "more": False}, []).fetch_raw("v1", SHAPE))

    assert excinfo.value.kind is FetchError.Kind.NOT_FOUND
