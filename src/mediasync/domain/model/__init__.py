"""Public domain model surface."""

from __future__ import annotations

from mediasync.domain.model.entity import new_id, utcnow
from mediasync.domain.model.enums import (
    JobKind,
    JobStatus,
    MediaLot,
    MediaSource,
    SyncPhase,
    VideoSource,
)
from mediasync.domain.model.jobs import (
    InternalTarget,
    JobError,
    ProviderTarget,
    RecurringSchedule,
    SyncFailure,
    SyncJob,
    SyncTarget,
)
from mediasync.domain.model.media import (
    CanonicalMediaRecord,
    CreatorCredit,
    CreatorGroup,
    IdentityKey,
    MediaAssets,
    MediaGroup,
    MediaMerge,
    MediaVideo,
    ProviderIdentity,
    Suggestion,
)
from mediasync.domain.model.specifics import (
    SPECIFICS_BY_LOT,
    AnimeSpecifics,
    AudioBookSpecifics,
    BookSpecifics,
    MangaSpecifics,
    MovieSpecifics,
    PodcastEpisode,
    PodcastSpecifics,
    ShowEpisode,
    ShowSeason,
    ShowSpecifics,
    TypeSpecifics,
    VideoGameSpecifics,
    VisualNovelSpecifics,
    empty_specifics,
    ensure_specifics_match,
    merge_specifics,
)

__all__ = [
    "SPECIFICS_BY_LOT",
    "AnimeSpecifics",
    "AudioBookSpecifics",
    "BookSpecifics",
    "CanonicalMediaRecord",
    "CreatorCredit",
    "CreatorGroup",
    "IdentityKey",
    "InternalTarget",
    "JobError",
    "JobKind",
    "JobStatus",
    "MangaSpecifics",
    "MediaAssets",
    "MediaGroup",
    "MediaLot",
    "MediaMerge",
    "MediaSource",
    "MediaVideo",
    "MovieSpecifics",
    "PodcastEpisode",
    "PodcastSpecifics",
    "ProviderIdentity",
    "ProviderTarget",
    "RecurringSchedule",
    "ShowEpisode",
    "ShowSeason",
    "ShowSpecifics",
    "Suggestion",
    "SyncFailure",
    "SyncJob",
    "SyncPhase",
    "SyncTarget",
    "TypeSpecifics",
    "VideoGameSpecifics",
    "VideoSource",
    "VisualNovelSpecifics",
    "empty_specifics",
    "ensure_specifics_match",
    "merge_specifics",
    "new_id",
    "utcnow",
]
