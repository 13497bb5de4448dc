"""Similarity scoring between an incoming record and stored candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rapidfuzz import fuzz

from mediasync.domain.errors import ResolutionError

from .normalize import normalize_title

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


@dataclass(slots=True, frozen=True)
class MatchScore:
    internal_id: UUID
    score: float


def title_similarity(left: str, right: str) -> float:
    """Token-order insensitive similarity of two titles in ``[0, 1]``."""

    return fuzz.token_sort_ratio(normalize_title(left), normalize_title(right)) / 100.0


def score_candidate(
    title: str,
    year: int | None,
    candidate_title: str,
    candidate_year: int | None,
    *,
    year_tolerance: int,
    missing_year_penalty: float,
) -> float | None:
    """Score a candidate, or ``None`` when its year rules it out."""

    if year is not None and candidate_year is not None:
        if abs(year - candidate_year) > year_tolerance:
            return None
        return title_similarity(title, candidate_title)
    return max(title_similarity(title, candidate_title) - missing_year_penalty, 0.0)


def choose_match(
    scores: Iterable[MatchScore],
    *,
    threshold: float,
    margin: float,
) -> MatchScore | None:
    """Pick the single candidate to attach to, if any.

    Raises ``ResolutionError(AMBIGUOUS_MATCH)`` when the best score sits just
    below the threshold, or when two distinct records clear it within
    ``margin`` of each other.
    """

    ranked = sorted(scores, key=lambda item: item.score, reverse=True)
    if not ranked:
        return None
    best = ranked[0]
    candidates = tuple((item.internal_id, item.score) for item in ranked[:5])
    if best.score < threshold:
        if best.score >= threshold - margin:
            raise ResolutionError(
                ResolutionError.Kind.AMBIGUOUS_MATCH,
                f"best candidate scored {best.score:.3f}, just below {threshold:.3f}",
                candidates=candidates,
            )
        return None
    rivals = [
        item
        for item in ranked[1:]
        if item.internal_id != best.internal_id
        and item.score >= threshold
        and best.score - item.score <= margin
    ]
    if rivals:
        raise ResolutionError(
            ResolutionError.Kind.AMBIGUOUS_MATCH,
            f"{len(rivals) + 1} records scored within {margin:.3f} of each other",
            candidates=candidates,
        )
    return best
