"""AniList configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_ANILIST_URL = "https://graphql.anilist.co"


@dataclass(frozen=True, slots=True)
class AniListConfig:
    resilience: ResilienceConfig


def get_anilist_config() -> AniListConfig:
    resilience = ResilienceConfig(
        name="anilist",
        base_url=DEFAULT_ANILIST_URL,
        cache=CacheConfig(enabled=False),
        default_headers={"Accept": "application/json", "Content-Type": "application/json"},
    )
    return AniListConfig(resilience=resilience)
