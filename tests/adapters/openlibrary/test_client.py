from __future__ import annotations

import asyncio

import httpx
import pytest

from mediasync.adapters.openlibrary import OpenLibraryProvider
from mediasync.domain.errors import AdapterError
from mediasync.domain.model import MediaLot
from mediasync.domain.ports import RequestShape

SHAPE = RequestShape(MediaLot.BOOK)


def test_fetch_raw_stitches_work_bundle(
    provider: OpenLibraryProvider, seen_requests: list[httpx.Request]
) -> None:
    raw = asyncio.run(provider.fetch_raw("OL27448W", SHAPE))

    assert raw["work"]["key"] == "/works/OL27448W"
    assert len(raw["editions"]) == 3
    assert [credit["role"] for credit in raw["credits"]] == [
        "/type/author_role",
        "/type/illustrator",
    ]
    assert raw["credits"][0]["author"]["name"] == "J.R.R. Tolkien"
    assert "carousel__item" in raw["related_html"]
    partials = next(request for request in seen_requests if request.url.path == "/partials.json")
    assert partials.url.params["workid"] == "OL27448W"
    assert partials.url.params["_component"] == "RelatedWorkCarousel"


def test_fetch_and_normalize(provider: OpenLibraryProvider) -> None:
    raw = asyncio.run(provider.fetch_raw("OL27448W", SHAPE))
    record = provider.normalize(raw, MediaLot.BOOK)

    assert record.title == "The Lord of the Rings"
    assert [item.title for item in record.suggestions] == ["The Hobbit", "The Silmarillion"]


def test_unknown_work_raises_status_error(provider: OpenLibraryProvider) -> None:
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(provider.fetch_raw("OL0W", SHAPE))


def test_only_books_are_served(provider: OpenLibraryProvider) -> None:
    with pytest.raises(AdapterError) as excinfo:
        asyncio.run(provider.fetch_raw("OL27448W", RequestShape(MediaLot.MOVIE)))

    assert excinfo.value.kind is AdapterError.Kind.UNSUPPORTED_LOT


def test_id_from_isbn(provider: OpenLibraryProvider) -> None:
    assert asyncio.run(provider.id_from_isbn("9780618640157")) == "OL27448W"


def test_id_from_unknown_isbn_is_none(provider: OpenLibraryProvider) -> None:
    assert asyncio.run(provider.id_from_isbn("0000000000")) is None
