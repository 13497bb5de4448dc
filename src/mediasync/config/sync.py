"""Synchronization and identity-resolution defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class SyncConfig:
    similarity_threshold: float = 0.92
    ambiguity_margin: float = 0.04
    year_tolerance: int = 1
    missing_year_penalty: float = 0.05
    worker_pool_size: int = 4
    job_queue_depth: int = 256
    max_job_attempts: int = 3
    job_backoff_seconds: float = 30.0
    max_job_backoff_seconds: float = 900.0
    poll_interval_seconds: float = 1.0
    shutdown_grace_seconds: float = 30.0
    cache_max_entries: int = 1024

    def __post_init__(self) -> None:
        if not 0.0 < self.similarity_threshold <= 1.0:
            raise ConfigurationError("similarity_threshold must be within (0, 1]")
        if not 0.0 <= self.ambiguity_margin < self.similarity_threshold:
            raise ConfigurationError("ambiguity_margin must be below the threshold")
        if self.worker_pool_size < 1 or self.job_queue_depth < 1:
            raise ConfigurationError("worker_pool_size and job_queue_depth must be >= 1")
        if self.max_job_attempts < 1:
            raise ConfigurationError("max_job_attempts must be >= 1")


def get_sync_config() -> SyncConfig:
    defaults = SyncConfig()
    return SyncConfig(
        similarity_threshold=optional_env(
            "MEDIASYNC_SIMILARITY_THRESHOLD", defaults.similarity_threshold, float
        ),
        ambiguity_margin=optional_env(
            "MEDIASYNC_AMBIGUITY_MARGIN", defaults.ambiguity_margin, float
        ),
        year_tolerance=optional_env("MEDIASYNC_YEAR_TOLERANCE", defaults.year_tolerance, int),
        missing_year_penalty=optional_env(
            "MEDIASYNC_MISSING_YEAR_PENALTY", defaults.missing_year_penalty, float
        ),
        worker_pool_size=optional_env(
            "MEDIASYNC_WORKER_POOL_SIZE", defaults.worker_pool_size, int
        ),
        job_queue_depth=optional_env("MEDIASYNC_JOB_QUEUE_DEPTH", defaults.job_queue_depth, int),
        max_job_attempts=optional_env(
            "MEDIASYNC_MAX_JOB_ATTEMPTS", defaults.max_job_attempts, int
        ),
        job_backoff_seconds=optional_env(
            "MEDIASYNC_JOB_BACKOFF_SECONDS", defaults.job_backoff_seconds, float
        ),
        max_job_backoff_seconds=optional_env(
            "MEDIASYNC_MAX_JOB_BACKOFF_SECONDS", defaults.max_job_backoff_seconds, float
        ),
        poll_interval_seconds=optional_env(
            "MEDIASYNC_POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds, float
        ),
        shutdown_grace_seconds=optional_env(
            "MEDIASYNC_SHUTDOWN_GRACE_SECONDS", defaults.shutdown_grace_seconds, float
        ),
        cache_max_entries=optional_env(
            "MEDIASYNC_CACHE_MAX_ENTRIES", defaults.cache_max_entries, int
        ),
    )
