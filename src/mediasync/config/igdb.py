"""IGDB configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, ResilienceConfig

DEFAULT_IGDB_BASE_URL = "https://api.igdb.com/v4/"
DEFAULT_IGDB_IMAGE_URL = "https://images.igdb.com/igdb/image/upload"


@dataclass(frozen=True, slots=True)
class IgdbConfig:
    resilience: ResilienceConfig
    image_base_url: str = DEFAULT_IGDB_IMAGE_URL
    image_size: str = "t_original"


def get_igdb_config() -> IgdbConfig:
    values = require_env_vars(("IGDB_CLIENT_ID", "IGDB_ACCESS_TOKEN"))
    resilience = ResilienceConfig(
        name="igdb",
        base_url=DEFAULT_IGDB_BASE_URL,
        cache=CacheConfig(enabled=False),
        default_headers={
            "Client-ID": values["IGDB_CLIENT_ID"],
            "Authorization": f"Bearer {values['IGDB_ACCESS_TOKEN']}",
            "Accept": "application/json",
        },
    )
    return IgdbConfig(resilience=resilience)
