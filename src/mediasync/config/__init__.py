"""Application configuration helpers."""

from __future__ import annotations

from .anilist import AniListConfig, get_anilist_config
from .audible import AudibleConfig, get_audible_config
from .env import optional_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, ResilienceConfig, RetryablePayloadError, RetryPolicy
from .igdb import IgdbConfig, get_igdb_config
from .itunes import ITunesConfig, get_itunes_config
from .logging import configure_logging
from .openlibrary import OpenLibraryConfig, get_openlibrary_config
from .providers import DEFAULT_PROVIDER_SETTINGS, ProviderSettings, get_provider_settings
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config
from .tmdb import TmdbConfig, get_tmdb_config
from .vndb import VndbConfig, get_vndb_config

__all__ = [
    "DEFAULT_PROVIDER_SETTINGS",
    "AniListConfig",
    "AudibleConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "ITunesConfig",
    "IgdbConfig",
    "MissingConfigurationError",
    "OpenLibraryConfig",
    "ProviderSettings",
    "ResilienceConfig",
    "RetryPolicy",
    "RetryablePayloadError",
    "StorageConfig",
    "SyncConfig",
    "TmdbConfig",
    "VndbConfig",
    "configure_logging",
    "get_anilist_config",
    "get_audible_config",
    "get_database_config",
    "get_igdb_config",
    "get_itunes_config",
    "get_openlibrary_config",
    "get_provider_settings",
    "get_storage_config",
    "get_sync_config",
    "get_tmdb_config",
    "get_vndb_config",
    "optional_env",
    "require_env_vars",
]
