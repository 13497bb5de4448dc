"""Synchronization orchestrator: job registry, worker pool and refresh entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from mediasync.config import SyncConfig
from mediasync.domain.errors import (
    FetchError,
    JobQueueFullError,
    RefreshCancelledError,
    RefreshFailedError,
    RefreshTimeoutError,
    StoreError,
    SyncError,
    TemporarilyUnavailableError,
    UpstreamNotFoundError,
)
from mediasync.domain.model import (
    JobError,
    JobKind,
    JobStatus,
    ProviderTarget,
    RecurringSchedule,
    SyncFailure,
    SyncJob,
    SyncPhase,
    utcnow,
)

from .state import advance, reset

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from mediasync.domain.model import MediaSource, SyncTarget
    from mediasync.domain.ports import MediaUnitOfWorkFactory

    from .pipeline import SyncOutcome, SyncUnitRunner

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class _AttemptResult:
    job: SyncJob
    outcome: SyncOutcome | None = None


class SyncOrchestrator:
    """Owns every ``SyncJob`` and is the only code that mutates them.

    Jobs are dispatched by ``tick``: due pending jobs are started on the
    worker pool, on-demand jobs ahead of scheduled ones. ``start`` runs
    ``tick`` in a poll loop; tests may call it directly.
    """

    def __init__(
        self,
        runner: SyncUnitRunner,
        uow_factory: MediaUnitOfWorkFactory,
        config: SyncConfig | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.runner = runner
        self.config = config or SyncConfig()
        self._uow_factory = uow_factory
        self._clock = clock
        self._jobs: dict[UUID, SyncJob] = {}
        self._job_by_key: dict[str, UUID] = {}
        self._running: dict[UUID, asyncio.Task[None]] = {}
        self._waiters: dict[UUID, asyncio.Future[_AttemptResult]] = {}
        self._schedules: dict[UUID, RecurringSchedule] = {}
        self._loop_task: asyncio.Task[None] | None = None
        self._wakeup: asyncio.Event | None = None

    @property
    def jobs(self) -> list[SyncJob]:
        return list(self._jobs.values())

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def get_job(self, target: SyncTarget) -> SyncJob | None:
        job_id = self._job_by_key.get(target.key)
        return self._jobs.get(job_id) if job_id is not None else None

    def enqueue_refresh(self, target: SyncTarget, *, kind: JobKind = JobKind.ON_DEMAND) -> SyncJob:
        """Queue a refresh of ``target``; a pending or running job is reused."""

        existing = self.get_job(target)
        if existing is not None:
            if kind is JobKind.ON_DEMAND and existing.status is JobStatus.PENDING:
                existing.kind = JobKind.ON_DEMAND
                existing.next_run_at = min(existing.next_run_at, self._clock())
                self._notify()
            return existing

        if len(self._jobs) >= self.config.job_queue_depth:
            raise JobQueueFullError(
                f"Job queue is full ({self.config.job_queue_depth} jobs); retry later"
            )
        job = SyncJob(target=target, kind=kind, next_run_at=self._clock())
        self._jobs[job.id] = job
        self._job_by_key[job.key] = job.id
        log.debug("Queued %s job %s for %s", kind, job.id, job.key)
        self._notify()
        return job

    async def refresh_now(self, target: SyncTarget, timeout: float | None = None) -> UUID:
        """Refresh ``target`` and wait for one attempt of its job to finish.

        Returns the internal id of the refreshed record. This does not block
        until the job is done or failed: when the attempt fails with a retryable
        error the job goes back to pending with backoff, and the caller gets
        ``TemporarilyUnavailableError`` carrying ``retry_at``. A fetch that
        used up its retry attempts fails the job and is reported as
        ``TemporarilyUnavailableError`` without ``retry_at``. On timeout the
        job keeps running; only the caller stops waiting.
        """

        job = self.enqueue_refresh(target, kind=JobKind.ON_DEMAND)
        waiter = self._waiter_for(job)
        self.tick()
        try:
            async with asyncio.timeout(timeout):
                result = await asyncio.shield(waiter)
        except TimeoutError as exc:
            raise RefreshTimeoutError(
                f"Timed out after {timeout}s waiting for {job.key}; the refresh continues"
            ) from exc
        return self._refresh_result(result)

    def cancel_pending(self, target: SyncTarget) -> bool:
        """Cancel a queued job that has not started; running jobs are left alone."""

        job = self.get_job(target)
        if job is None or job.status is not JobStatus.PENDING or job.id in self._running:
            return False
        job.status = JobStatus.CANCELLED
        self._forget(job)
        self._resolve_waiter(_AttemptResult(job))
        log.info("Cancelled pending job %s for %s", job.id, job.key)
        return True

    def schedule_recurring(
        self, sources: Iterable[MediaSource], interval: timedelta
    ) -> RecurringSchedule:
        """Periodically refresh identities of ``sources`` not synced within ``interval``."""

        source_set = frozenset(sources)
        if not source_set:
            raise ValueError("At least one source is required")
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        unknown = sorted(source for source in source_set if source not in self.runner.registry)
        if unknown:
            raise ValueError(f"No provider registered for: {', '.join(unknown)}")

        for schedule in self._schedules.values():
            if schedule.sources == source_set:
                schedule.interval = interval
                return schedule
        schedule = RecurringSchedule(
            sources=source_set, interval=interval, next_sweep_at=self._clock()
        )
        self._schedules[schedule.id] = schedule
        self._notify()
        return schedule

    def cancel_recurring(self, schedule_id: UUID) -> bool:
        return self._schedules.pop(schedule_id, None) is not None

    def tick(self) -> int:
        """Sweep due schedules and start due jobs; return how many were started."""

        now = self._clock()
        for schedule in list(self._schedules.values()):
            if schedule.next_sweep_at <= now:
                self._sweep(schedule, now)

        started = 0
        for job in self._due_jobs(now):
            if len(self._running) >= self.config.worker_pool_size:
                break
            self._start(job)
            started += 1
        return started

    async def wait_idle(self, timeout: float | None = None) -> None:
        """Dispatch until no job is pending or running."""

        async with asyncio.timeout(timeout):
            while True:
                self.tick()
                if self._running:
                    await asyncio.wait(
                        set(self._running.values()), return_when=asyncio.FIRST_COMPLETED
                    )
                    continue
                pending = [job for job in self._jobs.values() if job.status is JobStatus.PENDING]
                if not pending:
                    return
                next_due = min(job.next_run_at for job in pending)
                delay = (next_due - self._clock()).total_seconds()
                await asyncio.sleep(min(max(delay, 0.0), self.config.poll_interval_seconds))

    async def start(self) -> None:
        if self.is_running:
            return
        self._wakeup = asyncio.Event()
        self._loop_task = asyncio.create_task(self._poll_loop(), name="mediasync-orchestrator")
        log.info(
            "Sync orchestrator started (%d workers, %d jobs pending)",
            self.config.worker_pool_size,
            len(self._jobs),
        )

    async def shutdown(self, grace: float | None = None) -> None:
        """Stop dispatching, drain running jobs for ``grace`` seconds, cancel the rest.

        Cancelled and queued jobs stay pending and resume after ``start``.
        """

        grace_seconds = self.config.shutdown_grace_seconds if grace is None else grace
        if self._loop_task is not None:
            self._loop_task.cancel()
            await asyncio.gather(self._loop_task, return_exceptions=True)
            self._loop_task = None

        running = set(self._running.values())
        if running:
            _done, stragglers = await asyncio.wait(running, timeout=grace_seconds)
            for task in stragglers:
                task.cancel()
            if stragglers:
                log.warning("Cancelled %d sync jobs still running at shutdown", len(stragglers))
                await asyncio.gather(*stragglers, return_exceptions=True)
        log.info("Sync orchestrator stopped (%d jobs pending)", len(self._jobs))

    async def _poll_loop(self) -> None:
        wakeup = self._wakeup
        while True:
            self.tick()
            if wakeup is None:
                await asyncio.sleep(self.config.poll_interval_seconds)
                continue
            try:
                async with asyncio.timeout(self.config.poll_interval_seconds):
                    await wakeup.wait()
            except TimeoutError:
                pass
            wakeup.clear()

    def _due_jobs(self, now: datetime) -> list[SyncJob]:
        due = [
            job
            for job in self._jobs.values()
            if job.status is JobStatus.PENDING
            and job.id not in self._running
            and job.next_run_at <= now
        ]
        due.sort(
            key=lambda job: (job.kind is not JobKind.ON_DEMAND, job.next_run_at, job.created_at)
        )
        return due

    def _sweep(self, schedule: RecurringSchedule, now: datetime) -> None:
        capacity = self.config.job_queue_depth - len(self._jobs)
        if capacity <= 0:
            schedule.next_sweep_at = now + timedelta(seconds=self.config.poll_interval_seconds)
            return
        with self._uow_factory() as uow:
            stale = uow.repositories.media.list_stale_identities(
                schedule.sources, now - schedule.interval, limit=capacity
            )
        queued = 0
        for identity in stale:
            target = ProviderTarget(identity.source, identity.external_identifier, identity.lot)
            if self.get_job(target) is None:
                self.enqueue_refresh(target, kind=JobKind.SCHEDULED)
                queued += 1
        # A full batch means more identities may be stale; look again on the next poll.
        if len(stale) >= capacity:
            schedule.next_sweep_at = now + timedelta(seconds=self.config.poll_interval_seconds)
        else:
            schedule.next_sweep_at = now + schedule.interval
        if queued:
            log.info("Recurring sweep queued %d refreshes for %s", queued, sorted(schedule.sources))

    def _start(self, job: SyncJob) -> None:
        job.status = JobStatus.RUNNING
        job.attempts += 1
        task = asyncio.create_task(self._run(job), name=f"sync-job-{job.id}")
        self._running[job.id] = task
        task.add_done_callback(lambda done: self._finished(job, done))

    def _finished(self, job: SyncJob, task: asyncio.Task[None]) -> None:
        self._running.pop(job.id, None)
        # Cancelled before its first step, so _run never saw the cancellation.
        if task.cancelled() and job.status is JobStatus.RUNNING:
            self._abandon(job)
        self._notify()

    async def _run(self, job: SyncJob) -> None:
        log.debug("Running job %s for %s (attempt %d)", job.id, job.key, job.attempts)
        try:
            outcome = await self.runner.run(job)
        except asyncio.CancelledError:
            self._abandon(job)
            raise
        except SyncError as exc:
            self._handle_failure(job, exc)
        except Exception as exc:
            log.exception("Job %s for %s failed unexpectedly", job.id, job.key)
            self._fail(job, exc)
        else:
            job.status = JobStatus.DONE
            job.last_error = None
            self._forget(job)
            self._resolve_waiter(_AttemptResult(job, outcome))
            log.debug("Job %s for %s done", job.id, job.key)

    def _handle_failure(self, job: SyncJob, exc: SyncError) -> None:
        if not exc.retryable or job.attempts >= self.config.max_job_attempts:
            self._fail(job, exc)
            return
        delay = min(
            self.config.job_backoff_seconds * 2 ** (job.attempts - 1),
            self.config.max_job_backoff_seconds,
        )
        job.last_error = _job_error(exc)
        job.status = JobStatus.PENDING
        job.next_run_at = self._clock() + timedelta(seconds=delay)
        reset(job)
        log.warning(
            "Job %s for %s failed (%s); retry %d/%d in %.1fs",
            job.id,
            job.key,
            exc,
            job.attempts + 1,
            self.config.max_job_attempts,
            delay,
        )
        self._resolve_waiter(_AttemptResult(job))

    def _fail(self, job: SyncJob, exc: Exception) -> None:
        job.last_error = _job_error(exc)
        job.status = JobStatus.FAILED
        if job.phase is not SyncPhase.FAILED:
            advance(job, SyncPhase.FAILED)
        self._forget(job)
        log.warning(
            "Job %s for %s failed after %d attempt(s): %s", job.id, job.key, job.attempts, exc
        )
        failure = SyncFailure(
            target_key=job.key,
            kind=job.kind,
            attempts=job.attempts,
            error_type=job.last_error.error_type,
            error_kind=job.last_error.kind,
            message=job.last_error.message,
        )
        try:
            with self._uow_factory() as uow:
                uow.repositories.failures.add(failure)
                uow.commit()
        except StoreError:
            log.exception("Could not record failure of job %s", job.id)
        self._resolve_waiter(_AttemptResult(job))

    def _abandon(self, job: SyncJob) -> None:
        job.status = JobStatus.PENDING
        job.attempts = max(job.attempts - 1, 0)
        job.next_run_at = self._clock()
        reset(job)
        log.info("Job %s for %s returned to pending", job.id, job.key)
        self._resolve_waiter(_AttemptResult(job))

    def _forget(self, job: SyncJob) -> None:
        self._jobs.pop(job.id, None)
        if self._job_by_key.get(job.key) == job.id:
            del self._job_by_key[job.key]

    def _notify(self) -> None:
        if self._wakeup is not None:
            self._wakeup.set()

    def _waiter_for(self, job: SyncJob) -> asyncio.Future[_AttemptResult]:
        waiter = self._waiters.get(job.id)
        if waiter is None or waiter.done():
            waiter = asyncio.get_running_loop().create_future()
            self._waiters[job.id] = waiter
        return waiter

    def _resolve_waiter(self, result: _AttemptResult) -> None:
        waiter = self._waiters.pop(result.job.id, None)
        if waiter is not None and not waiter.done():
            waiter.set_result(result)

    @staticmethod
    def _refresh_result(result: _AttemptResult) -> UUID:
        job = result.job
        if job.status is JobStatus.DONE and result.outcome is not None:
            return result.outcome.internal_id
        if job.status is JobStatus.CANCELLED:
            raise RefreshCancelledError(f"Refresh of {job.key} was cancelled")
        error = job.last_error
        if job.status is JobStatus.PENDING:
            raise TemporarilyUnavailableError(
                f"Refresh of {job.key} did not complete; retry later",
                retry_at=job.next_run_at,
            )
        if error is not None and error.kind == FetchError.Kind.NOT_FOUND:
            raise UpstreamNotFoundError(f"{job.key} was not found upstream")
        if error is not None and (error.retryable or error.kind == FetchError.Kind.EXHAUSTED):
            raise TemporarilyUnavailableError(
                f"{job.key} is temporarily unavailable: {error.message}"
            )
        raise RefreshFailedError(
            f"Refresh of {job.key} failed: {error.message if error else 'unknown error'}",
            error=error,
        )


def _job_error(exc: Exception) -> JobError:
    if isinstance(exc, SyncError):
        return JobError(
            error_type=type(exc).__name__,
            kind=str(exc.kind),
            message=exc.message,
            retryable=exc.retryable,
        )
    return JobError(error_type=type(exc).__name__, kind=None, message=str(exc), retryable=False)
