"""Normalized record DTOs and their application to canonical records."""

from __future__ import annotations

from .apply import fill_gaps, merge_into, new_canonical
from .dto import NormalizedRecord

__all__ = ["NormalizedRecord", "fill_gaps", "merge_into", "new_canonical"]
