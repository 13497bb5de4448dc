"""Translate AniList media documents into normalized anime and manga records."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Final

from mediasync.adapters.provider_base import malformed, text_or_none, unique, validate_payload
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    AnimeSpecifics,
    CreatorCredit,
    CreatorGroup,
    MangaSpecifics,
    MediaAssets,
    MediaLot,
    MediaSource,
    MediaVideo,
    Suggestion,
    VideoSource,
)

from .schema import AniListMedia

if TYPE_CHECKING:
    from mediasync.domain.model import TypeSpecifics
    from mediasync.domain.ports import RawPayload

    from .schema import AniListFuzzyDate, AniListMediaType

SOURCE: Final = MediaSource.ANILIST
WEB_URL: Final[str] = "https://anilist.co"

MEDIA_TYPES: Final[dict[MediaLot, AniListMediaType]] = {
    MediaLot.ANIME: "ANIME",
    MediaLot.MANGA: "MANGA",
}
_LOTS_BY_TYPE: Final[dict[str, MediaLot]] = {value: lot for lot, value in MEDIA_TYPES.items()}
_TRAILER_SITES: Final[dict[str, VideoSource]] = {
    "youtube": VideoSource.YOUTUBE,
    "dailymotion": VideoSource.DAILYMOTION,
}


def translate_media(raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
    media = validate_payload(AniListMedia, raw, source=SOURCE)
    if _LOTS_BY_TYPE[media.type] is not lot:
        raise malformed(SOURCE, f"media {media.id} is {media.type}, not {lot}")
    title = text_or_none(media.title.best)
    if title is None:
        raise malformed(SOURCE, f"media {media.id} has no title")

    specifics: TypeSpecifics
    if lot is MediaLot.ANIME:
        specifics = AnimeSpecifics(episodes=media.episodes)
    else:
        specifics = MangaSpecifics(volumes=media.volumes, chapters=media.chapters)

    images = [
        url
        for url in (
            media.cover_image.extra_large if media.cover_image else None,
            media.banner_image,
        )
        if url
    ]
    videos: list[MediaVideo] = []
    if media.trailer and media.trailer.id and media.trailer.site in _TRAILER_SITES:
        videos.append(
            MediaVideo(video_id=media.trailer.id, source=_TRAILER_SITES[media.trailer.site])
        )

    return NormalizedRecord(
        source=SOURCE,
        identifier=str(media.id),
        lot=lot,
        title=title,
        specifics=specifics,
        description=text_or_none(media.description),
        source_url=media.site_url or f"{WEB_URL}/{media.type.lower()}/{media.id}",
        provider_rating=float(media.average_score) if media.average_score is not None else None,
        publish_year=media.start_date.year if media.start_date else None,
        publish_date=_fuzzy_date(media.start_date),
        is_nsfw=media.is_adult,
        genres=set(media.genres),
        creators=_creators(media),
        assets=MediaAssets(images=unique(images), videos=videos),
        suggestions=_suggestions(media, lot),
    )


def _fuzzy_date(value: AniListFuzzyDate | None) -> date | None:
    if value is None or value.year is None or value.month is None or value.day is None:
        return None
    try:
        return date(value.year, value.month, value.day)
    except ValueError:
        return None


def _creators(media: AniListMedia) -> list[CreatorGroup]:
    groups: dict[str, list[CreatorCredit]] = {}
    for edge in media.staff.edges if media.staff else []:
        name = text_or_none(edge.node.name.full)
        if name is None:
            continue
        role = text_or_none(edge.role) or "Staff"
        groups.setdefault(role, []).append(
            CreatorCredit(
                name=name,
                image=edge.node.image.large if edge.node.image else None,
                person_id=str(edge.node.id),
            )
        )
    studios = [edge.node.name for edge in media.studios.edges] if media.studios else []
    if studios:
        groups.setdefault("Production", []).extend(
            CreatorCredit(name=name) for name in unique(studios)
        )
    return [CreatorGroup(name=role, items=items) for role, items in groups.items()]


def _suggestions(media: AniListMedia, lot: MediaLot) -> list[Suggestion]:
    suggestions: list[Suggestion] = []
    nodes = media.recommendations.nodes if media.recommendations else []
    for node in nodes:
        item = node.media_recommendation
        if item is None or item.title is None:
            continue
        title = text_or_none(item.title.best)
        if title is None:
            continue
        suggestions.append(
            Suggestion(
                lot=_LOTS_BY_TYPE[item.type] if item.type else lot,
                source=SOURCE,
                identifier=str(item.id),
                title=title,
                image=item.cover_image.extra_large if item.cover_image else None,
            )
        )
    return suggestions
