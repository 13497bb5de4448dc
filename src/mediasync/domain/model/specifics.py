"""Lot-dependent extension payloads attached to canonical records.

Exactly one variant belongs to a record and its ``LOT`` must equal the record's
lot. Variants are plain dataclasses so pydantic can (de)serialise them for the
JSON storage columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date  # noqa: TC003
from typing import ClassVar, Final

from .enums import MediaLot


@dataclass(slots=True)
class AnimeSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.ANIME

    episodes: int | None = None


@dataclass(slots=True)
class AudioBookSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.AUDIO_BOOK

    runtime: int | None = None


@dataclass(slots=True)
class BookSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.BOOK

    pages: int | None = None


@dataclass(slots=True)
class MovieSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.MOVIE

    runtime: int | None = None


@dataclass(slots=True)
class MangaSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.MANGA

    volumes: int | None = None
    chapters: int | None = None


@dataclass(slots=True)
class PodcastEpisode:
    title: str
    number: int
    overview: str | None = None
    thumbnail: str | None = None
    runtime: int | None = None
    publish_date: date | None = None


@dataclass(slots=True)
class PodcastSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.PODCAST

    episodes: list[PodcastEpisode] = field(default_factory=list["PodcastEpisode"])
    total_episodes: int | None = None


@dataclass(slots=True)
class ShowEpisode:
    id: int
    name: str
    episode_number: int
    images: list[str] = field(default_factory=list[str])
    publish_date: date | None = None
    overview: str | None = None
    runtime: int | None = None


@dataclass(slots=True)
class ShowSeason:
    season_number: int
    name: str
    overview: str | None = None
    images: list[str] = field(default_factory=list[str])
    episodes: list[ShowEpisode] = field(default_factory=list["ShowEpisode"])


@dataclass(slots=True)
class ShowSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.SHOW

    seasons: list[ShowSeason] = field(default_factory=list["ShowSeason"])


@dataclass(slots=True)
class VisualNovelSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.VISUAL_NOVEL

    length: int | None = None


@dataclass(slots=True)
class VideoGameSpecifics:
    LOT: ClassVar[MediaLot] = MediaLot.VIDEO_GAME

    platforms: list[str] = field(default_factory=list[str])


type TypeSpecifics = (
    AnimeSpecifics
    | AudioBookSpecifics
    | BookSpecifics
    | MovieSpecifics
    | MangaSpecifics
    | PodcastSpecifics
    | ShowSpecifics
    | VisualNovelSpecifics
    | VideoGameSpecifics
)

SPECIFICS_BY_LOT: Final[dict[MediaLot, type[TypeSpecifics]]] = {
    MediaLot.ANIME: AnimeSpecifics,
    MediaLot.AUDIO_BOOK: AudioBookSpecifics,
    MediaLot.BOOK: BookSpecifics,
    MediaLot.MOVIE: MovieSpecifics,
    MediaLot.MANGA: MangaSpecifics,
    MediaLot.PODCAST: PodcastSpecifics,
    MediaLot.SHOW: ShowSpecifics,
    MediaLot.VISUAL_NOVEL: VisualNovelSpecifics,
    MediaLot.VIDEO_GAME: VideoGameSpecifics,
}


def empty_specifics(lot: MediaLot) -> TypeSpecifics:
    return SPECIFICS_BY_LOT[lot]()


def ensure_specifics_match(lot: MediaLot, specifics: TypeSpecifics) -> None:
    if specifics.LOT is not lot:
        raise ValueError(
            f"{type(specifics).__name__} does not belong to lot {lot.value!r}"
        )


def merge_specifics(current: TypeSpecifics, update: TypeSpecifics) -> TypeSpecifics:
    """Field-wise merge: absent (``None`` or empty) values in ``update`` keep ``current``."""

    if type(current) is not type(update):
        raise ValueError(
            f"Cannot merge {type(update).__name__} into {type(current).__name__}"
        )
    changes = {
        spec_field.name: value
        for spec_field in fields(update)
        if not _is_absent(value := getattr(update, spec_field.name))
    }
    return replace(current, **changes)


def _is_absent(value: object) -> bool:
    return value is None or (isinstance(value, list) and not value)
