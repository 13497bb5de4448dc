from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from mediasync.adapters.anilist import AniListProvider
from mediasync.adapters.fetch_client import RateLimitedFetchClient
from mediasync.config import AniListConfig, ResilienceConfig, RetryablePayloadError
from mediasync.config.anilist import DEFAULT_ANILIST_URL
from mediasync.domain.errors import AdapterError, FetchError
from mediasync.domain.model import MediaLot
from mediasync.domain.ports import RequestShape
from tests.helpers.data import load_fixture
from tests.helpers.http import json_response, make_client_factory, request_json
from tests.helpers.providers import fast_settings

if TYPE_CHECKING:
    from collections.abc import Callable

ANIME = RequestShape(MediaLot.ANIME)


def _provider(handler: Callable[[httpx.Request], httpx.Response]) -> AniListProvider:
    config = AniListConfig(
        resilience=ResilienceConfig(name="anilist", base_url=DEFAULT_ANILIST_URL, cache=None)
    )
    return AniListProvider(config=config, client_factory=make_client_factory(handler))


def test_fetch_posts_graphql_query() -> None:
    bodies: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request_json(request))
        return json_response(load_fixture("anilist/media_1.json"))

    raw = asyncio.run(_provider(handler).fetch_raw("1", ANIME))

    assert raw["title"]["userPreferred"] == "Cowboy Bebop"
    body = bodies[0]
    assert isinstance(body, dict)
    assert body["variables"] == {"id": 1, "type": "ANIME"}
    assert "Media(id: $id, type: $type)" in body["query"]


def test_non_numeric_identifier_is_invalid() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(_provider(handler).fetch_raw("bebop", ANIME))

    assert excinfo.value.kind is FetchError.Kind.INVALID_IDENTIFIER
    assert not excinfo.value.retryable


def test_graphql_not_found_is_reported() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return json_response(
            {"errors": [{"message": "Not Found.", "status": 404}], "data": {"Media": None}}
        )

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(_provider(handler).fetch_raw("999999", ANIME))

    assert excinfo.value.kind is FetchError.Kind.NOT_FOUND


def test_response_without_media_is_malformed() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return json_response({"data": {"Media": None}})

    with pytest.raises(AdapterError) as excinfo:
        asyncio.run(_provider(handler).fetch_raw("1", ANIME))

    assert excinfo.value.kind is AdapterError.Kind.MALFORMED_PAYLOAD


def test_throttling_reported_in_payload_is_retryable() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return json_response({"errors": [{"message": "Too Many Requests.", "status": 429}]})

    with pytest.raises(RetryablePayloadError):
        asyncio.run(_provider(handler).fetch_raw("1", ANIME))


def test_books_are_not_served() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(AdapterError) as excinfo:
        asyncio.run(_provider(handler).fetch_raw("1", RequestShape(MediaLot.BOOK)))

    assert excinfo.value.kind is AdapterError.Kind.UNSUPPORTED_LOT


def test_throttled_payload_is_retried_within_one_fetch() -> None:
    responses = [
        json_response({"errors": [{"message": "Too Many Requests.", "status": 429}]}),
        json_response(load_fixture("anilist/media_1.json")),
    ]

    def handler(_request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    client = RateLimitedFetchClient(settings_for=fast_settings)
    raw = asyncio.run(client.fetch(_provider(handler), "1", ANIME))

    assert raw["title"]["userPreferred"] == "Cowboy Bebop"
    assert responses == []
