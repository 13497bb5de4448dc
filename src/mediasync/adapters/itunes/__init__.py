"""Public interface for the iTunes adapter."""

from __future__ import annotations

from .client import ITunesProvider
from .schema import ITunesLookup, ITunesResult
from .translator import translate_podcast

__all__ = ["ITunesLookup", "ITunesProvider", "ITunesResult", "translate_podcast"]
