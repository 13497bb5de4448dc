from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import insert

from mediasync.adapters.sqlalchemy import SqlAlchemyDatabase, StartupError
from mediasync.adapters.sqlalchemy.tables import metadata_merge_table
from mediasync.domain.errors import StoreError
from mediasync.domain.model import new_id, utcnow
from tests.helpers.records import make_canonical

if TYPE_CHECKING:
    from pathlib import Path


def test_uncommitted_work_is_rolled_back(database: SqlAlchemyDatabase) -> None:
    record = make_canonical()

    with database.unit_of_work() as uow:
        uow.repositories.media.upsert_canonical(record)

    with database.unit_of_work() as uow:
        assert uow.repositories.media.get_canonical(record.id) is None


def test_error_inside_block_rolls_back(database: SqlAlchemyDatabase) -> None:
    record = make_canonical()

    with pytest.raises(RuntimeError), database.unit_of_work() as uow:
        uow.repositories.media.upsert_canonical(record)
        raise RuntimeError("boom")

    with database.unit_of_work() as uow:
        assert uow.repositories.media.get_canonical(record.id) is None


def test_integrity_error_surfaces_as_conflict(database: SqlAlchemyDatabase) -> None:
    merged_id = new_id()
    row = {"merged_id": merged_id, "survivor_id": new_id(), "merged_at": utcnow()}

    with pytest.raises(StoreError) as excinfo, database.unit_of_work() as uow:  # noqa: PT012
        uow.session.execute(insert(metadata_merge_table).values(**row))
        uow.session.execute(insert(metadata_merge_table).values(**row))

    assert excinfo.value.kind is StoreError.Kind.CONFLICT_ON_COMMIT
    assert excinfo.value.retryable


def test_repositories_require_an_open_block(database: SqlAlchemyDatabase) -> None:
    uow = database.unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_unit_of_work_cannot_be_entered_twice(database: SqlAlchemyDatabase) -> None:
    uow = database.unit_of_work()

    with uow, pytest.raises(StartupError):
        uow.__enter__()


def test_disposed_database_refuses_work() -> None:
    database = SqlAlchemyDatabase(database_uri="sqlite+pysqlite:///:memory:")
    database.dispose()

    with pytest.raises(StartupError):
        database.unit_of_work()
    with pytest.raises(StartupError):
        database.create_all()


def test_file_database_persists_between_instances(tmp_path: Path) -> None:
    uri = f"sqlite+pysqlite:///{tmp_path}/media.db"
    record = make_canonical()

    first = SqlAlchemyDatabase(database_uri=uri)
    first.create_all()
    with first.unit_of_work() as uow:
        uow.repositories.media.upsert_canonical(record)
        uow.commit()
    first.dispose()

    second = SqlAlchemyDatabase(database_uri=uri)
    try:
        with second.unit_of_work() as uow:
            stored = uow.repositories.media.get_canonical(record.id)
    finally:
        second.dispose()

    assert stored is not None
    assert stored.title == "The Matrix"
