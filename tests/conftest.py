from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from mediasync.adapters.sqlalchemy import SqlAlchemyDatabase

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from mediasync.adapters.sqlalchemy import SqlAlchemyMediaUnitOfWork


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIASYNC_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def database() -> Iterator[SqlAlchemyDatabase]:
    db = SqlAlchemyDatabase(database_uri="sqlite+pysqlite:///:memory:")
    db.create_all()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def uow_factory(database: SqlAlchemyDatabase) -> Callable[[], SqlAlchemyMediaUnitOfWork]:
    return database.unit_of_work
