"""Public interface for the TMDB adapter."""

from __future__ import annotations

from .client import TmdbProvider
from .schema import TmdbMovie, TmdbShow
from .translator import translate_movie, translate_show

__all__ = [
    "TmdbMovie",
    "TmdbProvider",
    "TmdbShow",
    "translate_movie",
    "translate_show",
]
