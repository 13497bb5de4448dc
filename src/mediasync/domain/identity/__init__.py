"""Identity resolution and duplicate detection."""

from __future__ import annotations

from .normalize import normalize_title, title_bucket
from .resolver import IdentityResolver, Resolution, ResolutionStatus
from .similarity import MatchScore, choose_match, score_candidate, title_similarity

__all__ = [
    "IdentityResolver",
    "MatchScore",
    "Resolution",
    "ResolutionStatus",
    "choose_match",
    "normalize_title",
    "score_candidate",
    "title_bucket",
    "title_similarity",
]
