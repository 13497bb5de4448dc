from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from mediasync.adapters.tmdb import TmdbProvider
from mediasync.config import TmdbConfig
from mediasync.domain.errors import AdapterError
from mediasync.domain.model import MediaLot, ShowSpecifics
from mediasync.domain.ports import RequestShape
from tests.helpers.data import load_fixture
from tests.helpers.http import json_response, make_client_factory

if TYPE_CHECKING:
    from mediasync.adapters.http_resilience import ResilientClient
    from mediasync.config import ResilienceConfig


def test_fetch_movie_appends_sub_resources(tmdb_config: TmdbConfig) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(load_fixture("tmdb/movie_603.json"))

    provider = TmdbProvider(config=tmdb_config, client_factory=make_client_factory(handler))

    raw = asyncio.run(provider.fetch_raw("603", RequestShape(MediaLot.MOVIE)))

    assert raw["id"] == 603
    assert len(seen) == 1
    assert seen[0].url.path == "/3/movie/603"
    assert seen[0].url.params["append_to_response"] == "credits,videos,recommendations"
    assert seen[0].url.params["language"] == "en-US"


def test_fetch_show_collects_every_season(tmdb_config: TmdbConfig) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/3/tv/1399":
            return json_response(load_fixture("tmdb/tv_1399.json"))
        number = request.url.path.rsplit("/", 1)[-1]
        return json_response(load_fixture(f"tmdb/tv_1399_season_{number}.json"))

    provider = TmdbProvider(config=tmdb_config, client_factory=make_client_factory(handler))

    raw = asyncio.run(provider.fetch_raw("1399", RequestShape(MediaLot.SHOW)))
    record = provider.normalize(raw, MediaLot.SHOW)

    assert sorted(paths) == ["/3/tv/1399", "/3/tv/1399/season/0", "/3/tv/1399/season/1"]
    assert [season["season_number"] for season in raw["season_details"]] == [0, 1]
    assert isinstance(record.specifics, ShowSpecifics)
    assert len(record.specifics.seasons[1].episodes) == 2
    assert record.specifics.seasons[1].episodes[0].images == [
        "https://images.example.test/t/p/w500/9hGF3WUkBf7cSjMg0cdMDHJkByd.jpg"
    ]


def test_fetch_surfaces_http_errors(tmdb_config: TmdbConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return json_response({"status_code": 34, "status_message": "Not found"}, 404)

    provider = TmdbProvider(config=tmdb_config, client_factory=make_client_factory(handler))

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        asyncio.run(provider.fetch_raw("999999999", RequestShape(MediaLot.MOVIE)))

    assert excinfo.value.response.status_code == 404


def test_unsupported_lot_is_rejected_before_any_request(tmdb_config: TmdbConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    provider = TmdbProvider(config=tmdb_config, client_factory=make_client_factory(handler))

    with pytest.raises(AdapterError) as excinfo:
        asyncio.run(provider.fetch_raw("603", RequestShape(MediaLot.BOOK)))

    assert excinfo.value.kind is AdapterError.Kind.UNSUPPORTED_LOT


def test_provider_reads_token_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMDB_ACCESS_TOKEN", "token")
    headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get("Authorization"))
        return json_response(load_fixture("tmdb/movie_603.json"))

    provider = TmdbProvider(client_factory=make_client_factory(handler))
    asyncio.run(provider.fetch_raw("603", RequestShape(MediaLot.MOVIE)))

    assert headers == ["Bearer token"]


def test_provider_reuses_one_client_until_closed(tmdb_config: TmdbConfig) -> None:
    handler_factory = make_client_factory(lambda _request: json_response({"id": 603}))
    clients: list[ResilientClient] = []

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        clients.append(handler_factory(resilience))
        return clients[-1]

    provider = TmdbProvider(config=tmdb_config, client_factory=factory)

    async def scenario() -> None:
        await provider.fetch_raw("603", RequestShape(MediaLot.MOVIE))
        await provider.fetch_raw("604", RequestShape(MediaLot.MOVIE))
        assert len(clients) == 1
        await provider.aclose()
        await provider.fetch_raw("605", RequestShape(MediaLot.MOVIE))
        await provider.aclose()

    asyncio.run(scenario())

    assert len(clients) == 2
    assert all(client.is_closed for client in clients)
