"""VNDB configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_VNDB_BASE_URL = "https://api.vndb.org/kana/"


@dataclass(frozen=True, slots=True)
class VndbConfig:
    resilience: ResilienceConfig


def get_vndb_config() -> VndbConfig:
    resilience = ResilienceConfig(
        name="vndb",
        base_url=DEFAULT_VNDB_BASE_URL,
        cache=CacheConfig(enabled=False),
        default_headers={"Accept": "application/json", "Content-Type": "application/json"},
    )
    return VndbConfig(resilience=resilience)
