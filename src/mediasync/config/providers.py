"""Per-provider rate limit, cache and retry settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final

from .env import optional_env
from .errors import ConfigurationError
from .http_resilience import RetryPolicy


@dataclass(slots=True, frozen=True)
class ProviderSettings:
    rate_limit_qps: float
    burst: int = 1
    max_concurrent: int = 2
    cache_ttl_seconds: float = 3600.0
    max_retry_attempts: int = 3
    queue_depth: int = 64
    queue_timeout_seconds: float | None = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if self.rate_limit_qps <= 0:
            raise ConfigurationError("rate_limit_qps must be positive")
        if self.burst < 1 or self.max_concurrent < 1 or self.queue_depth < 1:
            raise ConfigurationError("burst, max_concurrent and queue_depth must be >= 1")
        if self.max_retry_attempts < 1:
            raise ConfigurationError("max_retry_attempts must be >= 1")


# Published limits of the upstream services, rounded down.
DEFAULT_PROVIDER_SETTINGS: Final[dict[str, ProviderSettings]] = {
    "tmdb": ProviderSettings(rate_limit_qps=20.0, burst=20, max_concurrent=8),
    "openlibrary": ProviderSettings(rate_limit_qps=1.0, burst=2, max_concurrent=2),
    "anilist": ProviderSettings(rate_limit_qps=1.5, burst=5, max_concurrent=2),
    "itunes": ProviderSettings(rate_limit_qps=0.33, burst=5, max_concurrent=2),
    "igdb": ProviderSettings(rate_limit_qps=4.0, burst=4, max_concurrent=4),
    "vndb": ProviderSettings(rate_limit_qps=0.66, burst=10, max_concurrent=2),
    "audible": ProviderSettings(rate_limit_qps=2.0, burst=4, max_concurrent=2),
}

_FALLBACK_SETTINGS: Final = ProviderSettings(rate_limit_qps=1.0)


def _optional_float(value: str) -> float | None:
    if value.lower() in {"none", "off"}:
        return None
    return float(value)


def get_provider_settings(name: str) -> ProviderSettings:
    """Return settings for ``name``, applying ``MEDIASYNC_<NAME>_<FIELD>`` overrides."""

    base = DEFAULT_PROVIDER_SETTINGS.get(name, _FALLBACK_SETTINGS)
    prefix = f"MEDIASYNC_{name.upper()}_"
    return replace(
        base,
        rate_limit_qps=optional_env(f"{prefix}RATE_LIMIT_QPS", base.rate_limit_qps, float),
        burst=optional_env(f"{prefix}BURST", base.burst, int),
        max_concurrent=optional_env(f"{prefix}MAX_CONCURRENT", base.max_concurrent, int),
        cache_ttl_seconds=optional_env(
            f"{prefix}CACHE_TTL_SECONDS", base.cache_ttl_seconds, float
        ),
        max_retry_attempts=optional_env(
            f"{prefix}MAX_RETRY_ATTEMPTS", base.max_retry_attempts, int
        ),
        queue_depth=optional_env(f"{prefix}QUEUE_DEPTH", base.queue_depth, int),
        queue_timeout_seconds=optional_env(
            f"{prefix}QUEUE_TIMEOUT_SECONDS", base.queue_timeout_seconds, _optional_float
        ),
    )
