"""Translate iTunes lookups into normalized podcast records."""

from __future__ import annotations

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
    PodcastEpisode,
    PodcastSpecifics,
)

from .schema import ITunesLookup

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mediasync.domain.ports import RawPayload

    from .schema import ITunesResult

SOURCE: Final = MediaSource.ITUNES
EXPLICIT_RATING: Final[str] = "Explicit"


def translate_podcast(raw: RawPayload) -> NormalizedRecord:
    lookup = validate_payload(ITunesLookup, raw, source=SOURCE)
    podcast = next((item for item in lookup.results if not item.is_episode), None)
    if podcast is None:
        raise malformed(SOURCE, "lookup has no podcast entry")
    if podcast.kind not in {None, "podcast"}:
        raise malformed(SOURCE, f"lookup returned a {podcast.kind}, not a podcast")
    identifier = podcast.collection_id or podcast.track_id
    title = text_or_none(podcast.collection_name or podcast.track_name)
    if identifier is None or title is None:
        raise malformed(SOURCE, "podcast entry has no id or name")

    episodes = _episodes(item for item in lookup.results if item.is_episode)
    creators: list[CreatorGroup] = []
    if artist := text_or_none(podcast.artist_name):
        creators.append(CreatorGroup(name="Creator", items=[CreatorCredit(name=artist)]))
    genres = {
        genre
        for genre in (*podcast.genres, podcast.primary_genre_name)
        if isinstance(genre, str) and genre and genre != "Podcasts"
    }
    images = [url for url in (podcast.artwork_url_600, podcast.artwork_url_100) if url]
    return NormalizedRecord(
        source=SOURCE,
        identifier=str(identifier),
        lot=MediaLot.PODCAST,
        title=title,
        specifics=PodcastSpecifics(episodes=episodes, total_episodes=podcast.track_count),
        source_url=podcast.collection_view_url,
        publish_date=parse_iso_date(podcast.release_date),
        is_nsfw=(
            podcast.content_advisory_rating == EXPLICIT_RATING
            if podcast.content_advisory_rating
            else None
        ),
        genres=genres,
        creators=creators,
        assets=MediaAssets(images=unique(images)),
    )


def _episodes(items: Iterable[ITunesResult]) -> list[PodcastEpisode]:
    """Newest episode first, numbered from the oldest."""

    results = [item for item in items if item.track_name]
    episodes: list[PodcastEpisode] = []
    total = len(results)
    for index, item in enumerate(results):
        millis = item.track_time_millis
        episodes.append(
            PodcastEpisode(
                title=item.track_name or "",
                number=total - index,
                overview=text_or_none(item.description or item.short_description),
                thumbnail=item.artwork_url_160 or item.artwork_url_600,
                runtime=millis // 60000 if millis else None,
                publish_date=parse_iso_date(item.release_date),
            )
        )
    return episodes
