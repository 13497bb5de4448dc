"""Provider-agnostic normalized records produced by the adapters."""

# switch off type warnings because of default_factory=list or set
# pyright: reportUnknownVariableType=false

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from mediasync.domain.model import (
        CreatorGroup,
        MediaAssets,
        MediaGroup,
        MediaLot,
        MediaSource,
        Suggestion,
        TypeSpecifics,
    )


@dataclass(slots=True)
class NormalizedRecord:
    """One provider document translated into the canonical shape.

    Absent fields are ``None`` or empty; they never erase stored values.
    """

    source: MediaSource
    identifier: str
    lot: MediaLot
    title: str
    specifics: TypeSpecifics
    description: str | None = None
    source_url: str | None = None
    provider_rating: float | None = None
    publish_year: int | None = None
    publish_date: date | None = None
    is_nsfw: bool | None = None
    genres: set[str] = field(default_factory=set)
    creators: list[CreatorGroup] = field(default_factory=list)
    assets: MediaAssets | None = None
    group: MediaGroup | None = None
    suggestions: list[Suggestion] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.publish_year is None and self.publish_date is not None:
            self.publish_year = self.publish_date.year
