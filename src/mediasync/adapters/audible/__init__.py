"""Public interface for the Audible adapter."""

from __future__ import annotations

from .client import AudibleProvider
from .schema import AudibleBundle, AudibleProduct
from .translator import translate_audiobook

__all__ = ["AudibleBundle", "AudibleProduct", "AudibleProvider", "translate_audiobook"]
