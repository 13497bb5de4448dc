"""Error taxonomy shared by providers, the fetch client and the sync pipeline.

Each family carries a ``kind`` discriminator so the orchestrator can decide
between retrying a job and failing it closed without inspecting messages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from mediasync.domain.model import JobError


class SyncError(RuntimeError):
    """Base class for errors raised while running a sync unit."""

    RETRYABLE_KINDS: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, kind: StrEnum, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.kind in self.RETRYABLE_KINDS

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class AdapterErrorKind(StrEnum):
    MALFORMED_PAYLOAD = "malformedPayload"
    UNSUPPORTED_LOT = "unsupportedLot"


class AdapterError(SyncError):
    Kind = AdapterErrorKind

    def __init__(self, kind: AdapterErrorKind, message: str) -> None:
        super().__init__(kind, message)


class FetchErrorKind(StrEnum):
    RATE_LIMIT_TIMEOUT = "rateLimitTimeout"
    EXHAUSTED = "exhausted"
    NOT_FOUND = "notFound"
    INVALID_IDENTIFIER = "invalidIdentifier"
    QUEUE_FULL = "queueFull"
    REJECTED = "rejected"


class FetchError(SyncError):
    Kind = FetchErrorKind
    # EXHAUSTED is final for the job: the fetch already spent its retry attempts.
    RETRYABLE_KINDS = frozenset({FetchErrorKind.RATE_LIMIT_TIMEOUT, FetchErrorKind.QUEUE_FULL})

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        *,
        source: str | None = None,
        status_code: int | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(kind, message)
        self.source = source
        self.status_code = status_code
        self.attempts = attempts


class ResolutionErrorKind(StrEnum):
    AMBIGUOUS_MATCH = "ambiguousMatch"


class ResolutionError(SyncError):
    Kind = ResolutionErrorKind

    def __init__(
        self,
        kind: ResolutionErrorKind,
        message: str,
        *,
        candidates: tuple[tuple[UUID, float], ...] = (),
    ) -> None:
        super().__init__(kind, message)
        self.candidates = candidates


class StoreErrorKind(StrEnum):
    CONFLICT_ON_COMMIT = "conflictOnCommit"
    PERSISTENCE_UNAVAILABLE = "persistenceUnavailable"


class StoreError(SyncError):
    Kind = StoreErrorKind
    RETRYABLE_KINDS = frozenset(
        {StoreErrorKind.CONFLICT_ON_COMMIT, StoreErrorKind.PERSISTENCE_UNAVAILABLE}
    )

    def __init__(self, kind: StoreErrorKind, message: str) -> None:
        super().__init__(kind, message)


class JobQueueFullError(RuntimeError):
    """Raised when enqueueing would exceed the configured job queue depth."""


class MediaNotFoundError(LookupError):
    def __init__(self, internal_id: UUID) -> None:
        super().__init__(f"No media record with id {internal_id}")
        self.internal_id = internal_id


class RefreshError(RuntimeError):
    """Caller-facing failure of a synchronous refresh."""


class UpstreamNotFoundError(RefreshError):
    """The provider does not know the requested identifier."""


class TemporarilyUnavailableError(RefreshError):
    """A transient condition persisted; retry later."""

    def __init__(self, message: str, *, retry_at: datetime | None = None) -> None:
        super().__init__(message)
        self.retry_at = retry_at


class RefreshTimeoutError(RefreshError, TimeoutError):
    """The caller's deadline passed; the job keeps running in the background."""


class RefreshCancelledError(RefreshError):
    """The job was cancelled before it finished."""


class RefreshFailedError(RefreshError):
    """The job failed closed for a non-transient reason."""

    def __init__(self, message: str, *, error: JobError | None = None) -> None:
        super().__init__(message)
        self.error = error
