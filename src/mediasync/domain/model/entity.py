"""
Base building blocks:
identity and timestamps shared by persisted domain objects.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)
