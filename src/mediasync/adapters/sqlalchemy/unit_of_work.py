"""SQLAlchemy engine ownership and the media unit of work."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mediasync.config import get_database_config
from mediasync.domain.errors import StoreError
from mediasync.domain.ports import MediaRepositories

from .repositories import SqlAlchemyMediaRepository, SqlAlchemySyncFailureRepository
from .tables import metadata

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


def _is_sqlite_memory(uri: str) -> bool:
    return uri.startswith("sqlite") and (":memory:" in uri or uri.rstrip("/").endswith("sqlite:"))


def _enable_sqlite_wal(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection: Any, _record: object) -> None:  # noqa: ANN401
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()


class SqlAlchemyDatabase:
    """Owns the engine and session factory; hands out units of work."""

    def __init__(self, *, engine: Engine | None = None, database_uri: str | None = None) -> None:
        if engine is None:
            uri = database_uri or get_database_config().uri
            if _is_sqlite_memory(uri):
                # One shared connection, otherwise every session sees an empty database.
                engine = create_engine(
                    uri,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                engine = create_engine(uri)
                if engine.dialect.name == "sqlite":
                    _enable_sqlite_wal(engine)
        self._engine: Engine | None = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StartupError("database has been disposed")
        return self._engine

    def create_all(self) -> None:
        metadata.create_all(self.engine)
        log.debug("Schema ensured on %s", self.engine.url.render_as_string(hide_password=True))

    def unit_of_work(self) -> SqlAlchemyMediaUnitOfWork:
        if self._engine is None:
            raise StartupError("database has been disposed")
        return SqlAlchemyMediaUnitOfWork(self._session_factory)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None


def _store_error(exc: SQLAlchemyError) -> StoreError:
    if isinstance(exc, IntegrityError):
        return StoreError(StoreError.Kind.CONFLICT_ON_COMMIT, f"conflicting write: {exc.orig}")
    if isinstance(exc, OperationalError):
        return StoreError(
            StoreError.Kind.PERSISTENCE_UNAVAILABLE, f"database unavailable: {exc.orig}"
        )
    return StoreError(StoreError.Kind.PERSISTENCE_UNAVAILABLE, str(exc))


class SqlAlchemyMediaUnitOfWork:
    """Session-per-block unit of work over the media repositories.

    Database errors raised inside the block or on commit surface as
    ``StoreError`` so the sync pipeline can classify them.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None
        self._repositories: MediaRepositories | None = None

    def __enter__(self) -> SqlAlchemyMediaUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._repositories = MediaRepositories(
            media=SqlAlchemyMediaRepository(self._session),
            failures=SqlAlchemySyncFailureRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        if isinstance(exc_value, SQLAlchemyError):
            raise _store_error(exc_value) from exc_value
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise _store_error(exc) from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> MediaRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session


if TYPE_CHECKING:
    from mediasync.domain.ports import MediaUnitOfWork

    _uow_check: MediaUnitOfWork = SqlAlchemyMediaUnitOfWork(sessionmaker())
