"""iTunes Search API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_ITUNES_BASE_URL = "https://itunes.apple.com/"


@dataclass(frozen=True, slots=True)
class ITunesConfig:
    resilience: ResilienceConfig
    episode_limit: int = 200


def get_itunes_config() -> ITunesConfig:
    resilience = ResilienceConfig(
        name="itunes",
        base_url=DEFAULT_ITUNES_BASE_URL,
        cache=CacheConfig(enabled=True, backend="memory"),
    )
    return ITunesConfig(resilience=resilience)
