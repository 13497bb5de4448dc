"""Translate IGDB games into normalized video game records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from mediasync.adapters.provider_base import malformed, text_or_none, unique, validate_payload
from mediasync.config.igdb import DEFAULT_IGDB_IMAGE_URL
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    CreatorCredit,
    CreatorGroup,
    MediaAssets,
    MediaGroup,
    MediaLot,
    MediaSource,
    MediaVideo,
    Suggestion,
    VideoGameSpecifics,
    VideoSource,
)

from .schema import IgdbGame

if TYPE_CHECKING:
    from mediasync.domain.ports import RawPayload

SOURCE: Final = MediaSource.IGDB
ADULT_THEMES: Final[frozenset[str]] = frozenset({"Erotic"})


def image_url(
    image_id: str, *, base_url: str = DEFAULT_IGDB_IMAGE_URL, size: str = "t_original"
) -> str:
    return f"{base_url.rstrip('/')}/{size}/{image_id}.jpg"


def translate_game(
    raw: RawPayload,
    *,
    image_base_url: str = DEFAULT_IGDB_IMAGE_URL,
    image_size: str = "t_original",
) -> NormalizedRecord:
    game = validate_payload(IgdbGame, raw, source=SOURCE)
    title = text_or_none(game.name)
    if title is None:
        raise malformed(SOURCE, f"game {game.id} has no name")

    def url(image_id: str) -> str:
        return image_url(image_id, base_url=image_base_url, size=image_size)

    images = [url(game.cover.image_id)] if game.cover else []
    images.extend(url(artwork.image_id) for artwork in game.artworks)
    images.extend(url(shot.image_id) for shot in game.screenshots)

    released = (
        datetime.fromtimestamp(game.first_release_date, tz=UTC).date()
        if game.first_release_date is not None
        else None
    )
    group_source = game.collection or game.franchise
    return NormalizedRecord(
        source=SOURCE,
        identifier=str(game.id),
        lot=MediaLot.VIDEO_GAME,
        title=title,
        specifics=VideoGameSpecifics(platforms=unique(p.name for p in game.platforms)),
        description=text_or_none(game.summary) or text_or_none(game.storyline),
        source_url=game.url,
        provider_rating=game.total_rating,
        publish_date=released,
        is_nsfw=any(theme.name in ADULT_THEMES for theme in game.themes) if game.themes else None,
        genres={genre.name for genre in game.genres},
        creators=_creators(game),
        assets=MediaAssets(
            images=unique(images),
            videos=[
                MediaVideo(video_id=video.video_id, source=VideoSource.YOUTUBE)
                for video in game.videos
            ],
        ),
        group=(
            MediaGroup(identifier=str(group_source.id), name=group_source.name)
            if group_source
            else None
        ),
        suggestions=[
            Suggestion(
                lot=MediaLot.VIDEO_GAME,
                source=SOURCE,
                identifier=str(similar.id),
                title=similar.name,
                image=url(similar.cover.image_id) if similar.cover else None,
            )
            for similar in game.similar_games
            if similar.name
        ],
    )


def _creators(game: IgdbGame) -> list[CreatorGroup]:
    developers = [c.company.name for c in game.involved_companies if c.developer]
    publishers = [c.company.name for c in game.involved_companies if c.publisher]
    groups: list[CreatorGroup] = []
    for role, names in (("Development", developers), ("Publishing", publishers)):
        if names:
            groups.append(
                CreatorGroup(name=role, items=[CreatorCredit(name=name) for name in unique(names)])
            )
    return groups
