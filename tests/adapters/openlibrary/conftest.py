from __future__ import annotations

import httpx
import pytest

from mediasync.adapters.openlibrary import OpenLibraryProvider
from mediasync.config import ResilienceConfig
from mediasync.config.openlibrary import DEFAULT_OPENLIBRARY_BASE_URL, OpenLibraryConfig
from mediasync.domain.ports import RawPayload
from tests.helpers.data import load_fixture, load_text
from tests.helpers.http import json_response, make_client_factory

WORK_ID = "OL27448W"


@pytest.fixture
def bundle() -> RawPayload:
    return {
        "work": load_fixture(f"openlibrary/work_{WORK_ID}.json"),
        "editions": load_fixture(f"openlibrary/editions_{WORK_ID}.json")["entries"],
        "credits": [
            {
                "role": "/type/author_role",
                "author": load_fixture("openlibrary/author_OL26320A.json"),
            },
            {
                "role": "/type/illustrator",
                "author": load_fixture("openlibrary/author_OL2622837A.json"),
            },
        ],
        "related_html": load_text(f"openlibrary/related_{WORK_ID}.html"),
    }


def _route(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == f"/works/{WORK_ID}.json":
        return json_response(load_fixture(f"openlibrary/work_{WORK_ID}.json"))
    if path == f"/works/{WORK_ID}/editions.json":
        return json_response(load_fixture(f"openlibrary/editions_{WORK_ID}.json"))
    if path.startswith("/authors/"):
        return json_response(load_fixture(f"openlibrary{path}".replace("/authors/", "/author_")))
    if path == "/partials.json":
        return json_response({"0": load_text(f"openlibrary/related_{WORK_ID}.html")})
    if path == "/isbn/9780618640157.json":
        return json_response(
            {"key": "/books/OL31390631M", "works": [{"key": f"/works/{WORK_ID}"}]}
        )
    return json_response({"error": "notfound", "key": path}, 404)


@pytest.fixture
def seen_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def provider(seen_requests: list[httpx.Request]) -> OpenLibraryProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        seen_requests.append(request)
        return _route(request)

    config = OpenLibraryConfig(
        resilience=ResilienceConfig(
            name="openlibrary", base_url=DEFAULT_OPENLIBRARY_BASE_URL, cache=None
        )
    )
    return OpenLibraryProvider(config=config, client_factory=make_client_factory(handler))
