"""Audible configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .errors import ConfigurationError
from .http_resilience import CacheConfig, ResilienceConfig

AUDIBLE_LOCALE_DOMAINS: Final[dict[str, str]] = {
    "us": "com",
    "ca": "ca",
    "uk": "co.uk",
    "au": "com.au",
    "fr": "fr",
    "de": "de",
    "jp": "co.jp",
    "it": "it",
    "in": "in",
    "es": "es",
}


@dataclass(frozen=True, slots=True)
class AudibleConfig:
    resilience: ResilienceConfig
    locale: str = "us"

    @property
    def product_url_base(self) -> str:
        return f"https://www.audible.{AUDIBLE_LOCALE_DOMAINS[self.locale]}/pd/"


def get_audible_config() -> AudibleConfig:
    locale = (os.getenv("AUDIBLE_LOCALE") or "us").strip().lower()
    domain = AUDIBLE_LOCALE_DOMAINS.get(locale)
    if domain is None:
        raise ConfigurationError(f"Unsupported AUDIBLE_LOCALE: {locale!r}")
    resilience = ResilienceConfig(
        name="audible",
        base_url=f"https://api.audible.{domain}/1.0/",
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers={"Accept": "application/json"},
    )
    return AudibleConfig(resilience=resilience, locale=locale)
