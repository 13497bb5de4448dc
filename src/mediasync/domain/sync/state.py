"""Sync unit state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from mediasync.domain.model import SyncPhase

if TYPE_CHECKING:
    from mediasync.domain.model import SyncJob

TERMINAL_PHASES: Final[frozenset[SyncPhase]] = frozenset({SyncPhase.DONE, SyncPhase.FAILED})

# PENDING is re-entered from any running phase when a recoverable error occurs.
ALLOWED_TRANSITIONS: Final[dict[SyncPhase, frozenset[SyncPhase]]] = {
    SyncPhase.PENDING: frozenset({SyncPhase.FETCHING, SyncPhase.FAILED}),
    SyncPhase.FETCHING: frozenset({SyncPhase.NORMALIZING, SyncPhase.PENDING, SyncPhase.FAILED}),
    SyncPhase.NORMALIZING: frozenset({SyncPhase.RESOLVING, SyncPhase.PENDING, SyncPhase.FAILED}),
    SyncPhase.RESOLVING: frozenset({SyncPhase.WRITING, SyncPhase.PENDING, SyncPhase.FAILED}),
    SyncPhase.WRITING: frozenset({SyncPhase.DONE, SyncPhase.PENDING, SyncPhase.FAILED}),
    SyncPhase.DONE: frozenset(),
    SyncPhase.FAILED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    def __init__(self, current: SyncPhase, target: SyncPhase) -> None:
        super().__init__(f"Illegal sync transition {current} -> {target}")
        self.current = current
        self.target = target


def can_transition(current: SyncPhase, target: SyncPhase) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def advance(job: SyncJob, target: SyncPhase) -> None:
    """Move ``job`` to ``target``, recording the phase history."""

    if not can_transition(job.phase, target):
        raise InvalidTransitionError(job.phase, target)
    job.phase = target
    job.phase_history.append(target)


def reset(job: SyncJob) -> None:
    """Return a job to PENDING for its next attempt."""

    if job.phase is not SyncPhase.PENDING:
        advance(job, SyncPhase.PENDING)
