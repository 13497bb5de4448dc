from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from mediasync.adapters.sqlalchemy import SqlAlchemyDatabase
from mediasync.app import (
    MediaSyncApp,
    build_app,
    build_providers,
    load_details,
    recent_failures,
    refresh_media,
    sweep_sources,
)
from mediasync.config import MissingConfigurationError, SyncConfig
from mediasync.domain.errors import UpstreamNotFoundError
from mediasync.domain.model import MediaLot, MediaSource
from tests.helpers.providers import FakeProvider, fast_settings, movie_payload
from tests.helpers.records import make_canonical, seed_canonical

CONFIG = SyncConfig(job_backoff_seconds=0.0, poll_interval_seconds=0.01)


def _app(provider: FakeProvider) -> MediaSyncApp:
    return build_app(
        database=SqlAlchemyDatabase(database_uri="sqlite+pysqlite:///:memory:"),
        providers=[provider],
        config=CONFIG,
        settings_for=fast_settings,
    )


def test_build_providers_skips_providers_without_credentials(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("TMDB_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("IGDB_CLIENT_ID", raising=False)
    monkeypatch.delenv("IGDB_ACCESS_TOKEN", raising=False)

    sources = {provider.source for provider in build_providers()}

    assert MediaSource.TMDB not in sources
    assert MediaSource.IGDB not in sources
    assert {MediaSource.OPENLIBRARY, MediaSource.ANILIST, MediaSource.VNDB} <= sources


def test_build_providers_requires_credentials_when_asked_for(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("TMDB_ACCESS_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError):
        build_providers([MediaSource.TMDB])


def test_refresh_media_returns_canonical_view() -> None:
    provider = FakeProvider(outcomes={"603": movie_payload("603", "The Matrix", year=1999)})

    async def scenario() -> tuple[str, str]:
        async with _app(provider) as app:
            details = await refresh_media(
                app, source=MediaSource.TMDB, lot=MediaLot.MOVIE, identifier="603", timeout=5
            )
            again = load_details(app, details.internal_id)
            return details.record.title, again.record.title

    assert asyncio.run(scenario()) == ("The Matrix", "The Matrix")
    assert provider.closed


def test_failed_refresh_is_listed_in_recent_failures() -> None:
    provider = FakeProvider()

    async def scenario() -> list[str]:
        async with _app(provider) as app:
            with pytest.raises(UpstreamNotFoundError):
                await refresh_media(
                    app, source=MediaSource.TMDB, lot=MediaLot.MOVIE, identifier="404"
                )
            return [failure.target_key for failure in recent_failures(app)]

    assert asyncio.run(scenario()) == ["provider:tmdb:movie:404"]


def test_sweep_sources_refreshes_stale_identities() -> None:
    provider = FakeProvider(outcomes={"603": movie_payload("603", "The Matrix", year=1999)})

    async def scenario() -> int:
        async with _app(provider) as app:
            seed_canonical(app.database.unit_of_work, make_canonical())
            remaining = await sweep_sources(
                app, [MediaSource.TMDB], interval=timedelta(hours=1), drain_seconds=5
            )
            return remaining

    assert asyncio.run(scenario()) == 0
    assert provider.calls == ["603"]
