"""Translate TMDB payloads into normalized records."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Final

from mediasync.adapters.provider_base import (
    malformed,
    parse_iso_date,
    text_or_none,
    unique,
    validate_payload,
)
from mediasync.config.tmdb import DEFAULT_TMDB_IMAGE_URL
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    CreatorCredit,
    CreatorGroup,
    MediaAssets,
    MediaGroup,
    MediaLot,
    MediaSource,
    MediaVideo,
    MovieSpecifics,
    ShowEpisode,
    ShowSeason,
    ShowSpecifics,
    Suggestion,
    VideoSource,
)

from .schema import TmdbMovie, TmdbShow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mediasync.domain.ports import RawPayload

    from .schema import (
        TmdbCredits,
        TmdbRecommendations,
        TmdbSeason,
        TmdbSeasonSummary,
        TmdbVideos,
        _TmdbTitle,
    )

SOURCE: Final = MediaSource.TMDB
WEB_URL: Final[str] = "https://www.themoviedb.org"

# Crew jobs worth surfacing, in display order.
_CREW_JOBS: Final[tuple[str, ...]] = (
    "Director",
    "Screenplay",
    "Writer",
    "Novel",
    "Producer",
    "Original Music Composer",
    "Director of Photography",
)
_CAST_LIMIT: Final[int] = 20
_VIDEO_SITES: Final[dict[str, VideoSource]] = {
    "YouTube": VideoSource.YOUTUBE,
    "Dailymotion": VideoSource.DAILYMOTION,
}


def translate_movie(
    raw: RawPayload, *, image_base_url: str = DEFAULT_TMDB_IMAGE_URL
) -> NormalizedRecord:
    if "seasons" in raw or ("name" in raw and "title" not in raw):
        raise malformed(SOURCE, "TV show payload returned for a movie request")
    movie = validate_payload(TmdbMovie, raw, source=SOURCE)
    title = text_or_none(movie.title)
    if title is None:
        raise malformed(SOURCE, f"movie {movie.id} has no title")

    group = None
    if movie.belongs_to_collection is not None:
        group = MediaGroup(
            identifier=str(movie.belongs_to_collection.id),
            name=movie.belongs_to_collection.name,
        )
    return NormalizedRecord(
        source=SOURCE,
        identifier=str(movie.id),
        lot=MediaLot.MOVIE,
        title=title,
        specifics=MovieSpecifics(runtime=movie.runtime or None),
        source_url=f"{WEB_URL}/movie/{movie.id}",
        publish_date=parse_iso_date(movie.release_date),
        group=group,
        suggestions=_suggestions(movie.recommendations, MediaLot.MOVIE, image_base_url),
        **_common_fields(movie, image_base_url),
    )


def translate_show(
    raw: RawPayload, *, image_base_url: str = DEFAULT_TMDB_IMAGE_URL
) -> NormalizedRecord:
    if "title" in raw and "name" not in raw:
        raise malformed(SOURCE, "movie payload returned for a show request")
    show = validate_payload(TmdbShow, raw, source=SOURCE)
    title = text_or_none(show.name)
    if title is None:
        raise malformed(SOURCE, f"show {show.id} has no name")

    creators = _creator_groups(show.credits, image_base_url)
    if show.created_by:
        creators.insert(
            0,
            CreatorGroup(
                name="Creator",
                items=[
                    CreatorCredit(
                        name=person.name,
                        image=_image(image_base_url, person.profile_path),
                        person_id=str(person.id),
                    )
                    for person in show.created_by
                ],
            ),
        )
    common = _common_fields(show, image_base_url)
    common["creators"] = creators
    return NormalizedRecord(
        source=SOURCE,
        identifier=str(show.id),
        lot=MediaLot.SHOW,
        title=title,
        specifics=ShowSpecifics(seasons=_seasons(show, image_base_url)),
        source_url=f"{WEB_URL}/tv/{show.id}",
        publish_date=parse_iso_date(show.first_air_date),
        suggestions=_suggestions(show.recommendations, MediaLot.SHOW, image_base_url),
        **common,
    )


def _common_fields(item: _TmdbTitle, image_base_url: str) -> dict[str, object]:
    rating = item.vote_average if item.vote_count else None
    companies = [company.name for company in item.production_companies]
    creators = _creator_groups(item.credits, image_base_url)
    if companies:
        creators.append(
            CreatorGroup(
                name="Production Company",
                items=[CreatorCredit(name=name) for name in unique(companies)],
            )
        )
    return {
        "description": text_or_none(item.overview),
        "provider_rating": rating,
        "is_nsfw": item.adult,
        "genres": {genre.name for genre in item.genres},
        "creators": creators,
        "assets": MediaAssets(
            images=unique(
                url
                for url in (
                    _image(image_base_url, item.poster_path),
                    _image(image_base_url, item.backdrop_path),
                )
                if url is not None
            ),
            videos=_videos(item.videos),
        ),
    }


def _creator_groups(credits: TmdbCredits | None, image_base_url: str) -> list[CreatorGroup]:
    if credits is None:
        return []
    by_job: dict[str, list[CreatorCredit]] = defaultdict(list)
    for member in credits.crew:
        if member.job in _CREW_JOBS:
            by_job[member.job].append(
                CreatorCredit(
                    name=member.name,
                    image=_image(image_base_url, member.profile_path),
                    person_id=str(member.id),
                )
            )
    groups = [CreatorGroup(name=job, items=by_job[job]) for job in _CREW_JOBS if by_job.get(job)]
    cast = sorted(credits.cast, key=lambda member: member.order if member.order is not None else 0)
    if cast:
        groups.append(
            CreatorGroup(
                name="Actor",
                items=[
                    CreatorCredit(
                        name=member.name,
                        image=_image(image_base_url, member.profile_path),
                        person_id=str(member.id),
                    )
                    for member in cast[:_CAST_LIMIT]
                ],
            )
        )
    return groups


def _videos(videos: TmdbVideos | None) -> list[MediaVideo]:
    if videos is None:
        return []
    return [
        MediaVideo(video_id=video.key, source=_VIDEO_SITES[video.site])
        for video in videos.results
        if video.site in _VIDEO_SITES
    ]


def _suggestions(
    recommendations: TmdbRecommendations | None, lot: MediaLot, image_base_url: str
) -> list[Suggestion]:
    if recommendations is None:
        return []
    suggestions: list[Suggestion] = []
    for item in recommendations.results:
        title = text_or_none(item.title or item.name)
        if title is None:
            continue
        suggestions.append(
            Suggestion(
                lot=lot,
                source=SOURCE,
                identifier=str(item.id),
                title=title,
                image=_image(image_base_url, item.poster_path),
            )
        )
    return suggestions


def _seasons(show: TmdbShow, image_base_url: str) -> list[ShowSeason]:
    details = {season.season_number: season for season in show.season_details}
    summaries: Iterable[TmdbSeasonSummary | TmdbSeason] = show.seasons or show.season_details
    seasons: list[ShowSeason] = []
    for summary in summaries:
        detail = details.get(summary.season_number)
        seasons.append(
            ShowSeason(
                season_number=summary.season_number,
                name=summary.name,
                overview=text_or_none(summary.overview),
                images=[url for url in [_image(image_base_url, summary.poster_path)] if url],
                episodes=_episodes(detail, image_base_url) if detail is not None else [],
            )
        )
    return seasons


def _episodes(season: TmdbSeason, image_base_url: str) -> list[ShowEpisode]:
    return [
        ShowEpisode(
            id=episode.id,
            name=episode.name,
            episode_number=episode.episode_number,
            images=[url for url in [_image(image_base_url, episode.still_path)] if url],
            publish_date=parse_iso_date(episode.air_date),
            overview=text_or_none(episode.overview),
            runtime=episode.runtime,
        )
        for episode in season.episodes
    ]


def _image(base_url: str, path: str | None) -> str | None:
    if not path:
        return None
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
