"""Shared fixtures for TMDB adapter tests."""

from __future__ import annotations

import pytest

from mediasync.config import ResilienceConfig, TmdbConfig
from mediasync.config.tmdb import DEFAULT_TMDB_BASE_URL
from mediasync.domain.ports import RawPayload
from tests.helpers.data import load_fixture


@pytest.fixture
def movie_payload() -> RawPayload:
    return load_fixture("tmdb/movie_603.json")


@pytest.fixture
def show_payload() -> RawPayload:
    payload = load_fixture("tmdb/tv_1399.json")
    payload["season_details"] = [
        load_fixture("tmdb/tv_1399_season_0.json"),
        load_fixture("tmdb/tv_1399_season_1.json"),
    ]
    return payload


@pytest.fixture
def tmdb_config() -> TmdbConfig:
    return TmdbConfig(
        resilience=ResilienceConfig(name="tmdb", base_url=DEFAULT_TMDB_BASE_URL, cache=None),
        image_base_url="https://images.example.test/t/p/w500",
    )
