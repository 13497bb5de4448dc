"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MediaLot(StrEnum):
    """Media kind discriminator."""

    MOVIE = "movie"
    SHOW = "show"
    BOOK = "book"
    ANIME = "anime"
    MANGA = "manga"
    PODCAST = "podcast"
    VIDEO_GAME = "videoGame"
    VISUAL_NOVEL = "visualNovel"
    AUDIO_BOOK = "audioBook"


class MediaSource(StrEnum):
    TMDB = "tmdb"
    OPENLIBRARY = "openlibrary"
    ANILIST = "anilist"
    ITUNES = "itunes"
    IGDB = "igdb"
    VNDB = "vndb"
    AUDIBLE = "audible"


class VideoSource(StrEnum):
    YOUTUBE = "youtube"
    DAILYMOTION = "dailymotion"
    CUSTOM = "custom"


class JobKind(StrEnum):
    SCHEDULED = "scheduled"
    ON_DEMAND = "onDemand"


class JobStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SyncPhase(StrEnum):
    """Per sync unit progress, see ``mediasync.domain.sync.state``."""

    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    RESOLVING = "resolving"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"
