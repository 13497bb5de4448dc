"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        raise MissingConfigurationError(missing)

    return values


def optional_env[T](name: str, default: T, parse: Callable[[str], T]) -> T:
    """Return ``parse(value)`` for a set variable, ``default`` when absent or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return parse(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from exc
