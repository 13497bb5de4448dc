"""Synchronization engine: state machine, store writer, pipeline and orchestrator."""

from __future__ import annotations

from .orchestrator import SyncOrchestrator
from .pipeline import SyncOutcome, SyncUnitRunner
from .registry import ProviderRegistry
from .state import ALLOWED_TRANSITIONS, InvalidTransitionError, advance, can_transition
from .writer import CanonicalStoreWriter, CommitResult

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CanonicalStoreWriter",
    "CommitResult",
    "InvalidTransitionError",
    "ProviderRegistry",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncUnitRunner",
    "advance",
    "can_transition",
]
