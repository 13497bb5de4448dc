"""OpenLibrary configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, cast

from .errors import ConfigurationError
from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_OPENLIBRARY_BASE_URL = "https://openlibrary.org/"
DEFAULT_OPENLIBRARY_COVER_URL = "https://covers.openlibrary.org"
AUTHOR_CACHE_TTL_SECONDS = 86400.0

type CoverSize = Literal["S", "M", "L"]


@dataclass(frozen=True, slots=True)
class OpenLibraryConfig:
    resilience: ResilienceConfig
    cover_base_url: str = DEFAULT_OPENLIBRARY_COVER_URL
    cover_size: CoverSize = "M"


def get_openlibrary_config() -> OpenLibraryConfig:
    size = (os.getenv("OPENLIBRARY_COVER_SIZE") or "M").strip().upper()
    if size not in {"S", "M", "L"}:
        raise ConfigurationError(f"Invalid OPENLIBRARY_COVER_SIZE: {size!r}")
    # Author documents are shared between many works, so they go through a
    # persistent HTTP cache.
    resilience = ResilienceConfig(
        name="openlibrary",
        base_url=DEFAULT_OPENLIBRARY_BASE_URL,
        cache=CacheConfig(
            enabled=True,
            backend="sqlite",
            default_ttl_seconds=AUTHOR_CACHE_TTL_SECONDS,
        ),
        default_headers={"Accept": "application/json"},
    )
    return OpenLibraryConfig(resilience=resilience, cover_size=cast("CoverSize", size))
