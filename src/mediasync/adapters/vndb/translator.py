"""Translate VNDB entries into normalized visual novel records."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from mediasync.adapters.provider_base import (
    malformed,
    parse_iso_date,
    text_or_none,
    unique,
    validate_payload,
)
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    CreatorCredit,
    CreatorGroup,
    MediaAssets,
    MediaLot,
    MediaSource,
    VisualNovelSpecifics,
)

from .schema import VndbVisualNovel

if TYPE_CHECKING:
    from mediasync.domain.ports import RawPayload

SOURCE: Final = MediaSource.VNDB
WEB_URL: Final[str] = "https://vndb.org"
# VNDB flags: 0 safe, 1 suggestive, 2 explicit.
EXPLICIT_IMAGE_THRESHOLD: Final[float] = 1.5
GENRE_TAG_LIMIT: Final[int] = 10
# Inline formatting codes such as [url=/v17]...[/url].
_MARKUP = re.compile(r"\[/?(?:url|spoiler|b|i|u|s|raw|quote|code)(?:=[^\]]*)?\]")


def translate_visual_novel(raw: RawPayload) -> NormalizedRecord:
    novel = validate_payload(VndbVisualNovel, raw, source=SOURCE)
    title = text_or_none(novel.title)
    if not novel.id or title is None:
        raise malformed(SOURCE, f"entry {novel.id!r} has no id or title")

    images = [novel.image.url] if novel.image else []
    images.extend(shot.url for shot in novel.screenshots)
    tags = sorted(
        (tag for tag in novel.tags if tag.spoiler == 0),
        key=lambda tag: tag.rating or 0.0,
        reverse=True,
    )
    developers = unique(developer.name for developer in novel.developers)
    return NormalizedRecord(
        source=SOURCE,
        identifier=novel.id,
        lot=MediaLot.VISUAL_NOVEL,
        title=title,
        specifics=VisualNovelSpecifics(length=novel.length_minutes),
        description=_strip_markup(novel.description),
        source_url=f"{WEB_URL}/{novel.id}",
        # Ratings are on a 10-100 scale.
        provider_rating=novel.rating,
        publish_date=parse_iso_date(novel.released),
        is_nsfw=(
            novel.image.sexual >= EXPLICIT_IMAGE_THRESHOLD
            if novel.image and novel.image.sexual is not None
            else None
        ),
        genres={tag.name for tag in tags[:GENRE_TAG_LIMIT]},
        creators=(
            [
                CreatorGroup(
                    name="Development",
                    items=[CreatorCredit(name=name) for name in developers],
                )
            ]
            if developers
            else []
        ),
        assets=MediaAssets(images=unique(images)),
    )


def _strip_markup(text: str | None) -> str | None:
    if text is None:
        return None
    return text_or_none(_MARKUP.sub("", text))
