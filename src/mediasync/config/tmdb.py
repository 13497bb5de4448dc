"""TMDB configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_TMDB_BASE_URL = "https://api.themoviedb.org/3/"
DEFAULT_TMDB_IMAGE_URL = "https://image.tmdb.org/t/p/original"
DEFAULT_TMDB_LANGUAGE = "en-US"


@dataclass(frozen=True, slots=True)
class TmdbConfig:
    resilience: ResilienceConfig
    language: str = DEFAULT_TMDB_LANGUAGE
    image_base_url: str = DEFAULT_TMDB_IMAGE_URL


def get_tmdb_config() -> TmdbConfig:
    values = require_env_vars(("TMDB_ACCESS_TOKEN",))
    resilience = ResilienceConfig(
        name="tmdb",
        base_url=DEFAULT_TMDB_BASE_URL,
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers={
            "Authorization": f"Bearer {values['TMDB_ACCESS_TOKEN']}",
            "Accept": "application/json",
        },
    )
    return TmdbConfig(
        resilience=resilience,
        language=os.getenv("TMDB_LANGUAGE") or DEFAULT_TMDB_LANGUAGE,
    )
