"""SQLAlchemy adapter package for mediasync."""

from __future__ import annotations

from .repositories import SqlAlchemyMediaRepository, SqlAlchemySyncFailureRepository
from .tables import metadata
from .unit_of_work import SqlAlchemyDatabase, SqlAlchemyMediaUnitOfWork, StartupError

__all__ = [
    "SqlAlchemyDatabase",
    "SqlAlchemyMediaRepository",
    "SqlAlchemyMediaUnitOfWork",
    "SqlAlchemySyncFailureRepository",
    "StartupError",
    "metadata",
]
