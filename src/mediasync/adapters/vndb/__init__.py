"""Public interface for the VNDB adapter."""

from __future__ import annotations

from .client import VndbProvider, vn_id
from .schema import VndbVisualNovel
from .translator import translate_visual_novel

__all__ = ["VndbProvider", "VndbVisualNovel", "translate_visual_novel", "vn_id"]
