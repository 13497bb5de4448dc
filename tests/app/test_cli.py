from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from mediasync.adapters.sqlalchemy import SqlAlchemyDatabase
from mediasync.app import MediaSyncApp, build_app
from mediasync.config import SyncConfig
from mediasync.ui import cli
from tests.helpers.providers import FakeProvider, fast_settings, movie_payload

if TYPE_CHECKING:
    import argparse
    from pathlib import Path


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeProvider:
    fake = FakeProvider(outcomes={"603": movie_payload("603", "The Matrix", year=1999)})
    uri = f"sqlite+pysqlite:///{tmp_path / 'cli.db'}"

    def app_for(_args: argparse.Namespace) -> MediaSyncApp:
        return build_app(
            database=SqlAlchemyDatabase(database_uri=uri),
            providers=[fake],
            config=SyncConfig(job_backoff_seconds=0.0, poll_interval_seconds=0.01),
            settings_for=fast_settings,
        )

    monkeypatch.setattr(cli, "_app_for", app_for)
    return fake


def test_refresh_prints_record_document(
    provider: FakeProvider, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["refresh", "--source", "tmdb", "--lot", "movie", "--identifier", "603"])

    document = json.loads(capsys.readouterr().out)
    assert document["title"] == "The Matrix"
    assert document["identities"][0]["identifier"] == "603"
    assert provider.calls == ["603"]


def test_details_prints_stored_record(
    provider: FakeProvider, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["refresh", "--source", "tmdb", "--lot", "movie", "--identifier", "603"])
    internal_id = json.loads(capsys.readouterr().out)["id"]

    cli.main(["details", internal_id])

    assert json.loads(capsys.readouterr().out)["id"] == internal_id
    assert provider.calls == ["603"]


def test_failed_refresh_exits_and_is_listed(
    provider: FakeProvider, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["refresh", "--source", "tmdb", "--lot", "movie", "--identifier", "404"])
    assert excinfo.value.code == 1

    cli.main(["failures"])

    output = capsys.readouterr().out
    assert "provider:tmdb:movie:404" in output
    assert "[FetchError/notFound]" in output
    assert provider.calls == ["404"]


@pytest.mark.parametrize(
    "argv",
    [
        ["details", "not-a-uuid"],
        ["refresh", "--source", "tmdb", "--lot", "movie", "--identifier", "1", "--timeout", "0"],
        ["sweep", "--source", "tmdb", "--interval-hours", "0"],
        ["failures", "--limit", "0"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(
    provider: FakeProvider, argv: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2
    assert provider.calls == []


def test_unknown_source_is_rejected_by_argparse(provider: FakeProvider) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["refresh", "--source", "netflix", "--lot", "movie", "--identifier", "1"])

    assert excinfo.value.code == 2
    assert provider.calls == []
