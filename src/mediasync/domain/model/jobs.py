"""Synchronization job state owned by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta  # noqa: TC003
from uuid import UUID  # noqa: TC003

from .entity import new_id, utcnow
from .enums import JobKind, JobStatus, MediaLot, MediaSource, SyncPhase


@dataclass(slots=True, frozen=True)
class ProviderTarget:
    source: MediaSource
    identifier: str
    lot: MediaLot

    @property
    def key(self) -> str:
        return f"provider:{self.source}:{self.lot}:{self.identifier}"


@dataclass(slots=True, frozen=True)
class InternalTarget:
    internal_id: UUID

    @property
    def key(self) -> str:
        return f"internal:{self.internal_id}"


type SyncTarget = ProviderTarget | InternalTarget


@dataclass(slots=True)
class JobError:
    """Summary of the error that last moved a job."""

    error_type: str
    kind: str | None
    message: str
    retryable: bool


@dataclass(eq=False, kw_only=True)
class SyncJob:
    id: UUID = field(default_factory=new_id)
    target: SyncTarget
    kind: JobKind
    status: JobStatus = JobStatus.PENDING
    phase: SyncPhase = SyncPhase.PENDING
    attempts: int = 0
    next_run_at: datetime = field(default_factory=utcnow)
    last_error: JobError | None = None
    created_at: datetime = field(default_factory=utcnow)
    phase_history: list[SyncPhase] = field(default_factory=list[SyncPhase], repr=False)

    @property
    def key(self) -> str:
        return self.target.key

    @property
    def is_active(self) -> bool:
        return self.status in {JobStatus.PENDING, JobStatus.RUNNING}


@dataclass(slots=True)
class SyncFailure:
    """Persisted record of a job that exhausted its attempts or failed closed."""

    target_key: str
    kind: JobKind
    attempts: int
    error_type: str
    error_kind: str | None
    message: str
    id: UUID = field(default_factory=new_id)
    failed_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class RecurringSchedule:
    """Periodic freshness sweep over every identity of ``sources``."""

    id: UUID = field(default_factory=new_id)
    sources: frozenset[MediaSource]
    interval: timedelta
    next_sweep_at: datetime = field(default_factory=utcnow)
