"""Where mediasync keeps its database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def directory(self) -> Path:
        """The resolved data directory, created if missing."""

        path = self.data_dir.expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.directory() / 'mediasync.db'}"

    def http_cache_path(self) -> Path:
        return self.directory() / "http_cache.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("MEDIASYNC_DATA_DIR")
    if env_dir:
        return StorageConfig(data_dir=Path(env_dir))
    xdg_data = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "mediasync")


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
