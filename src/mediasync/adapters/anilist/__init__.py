"""Public interface for the AniList adapter."""

from __future__ import annotations

from .client import AniListProvider, raise_on_throttled_payload
from .schema import AniListMedia
from .translator import translate_media

__all__ = ["AniListMedia", "AniListProvider", "raise_on_throttled_payload", "translate_media"]
