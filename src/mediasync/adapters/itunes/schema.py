"""iTunes Search API lookup schemas."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class ITunesBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "iTunes"


class ITunesResult(ITunesBaseModel):
    wrapper_type: str | None = Field(default=None, alias="wrapperType")
    kind: str | None = None
    collection_id: int | None = Field(default=None, alias="collectionId")
    track_id: int | None = Field(default=None, alias="trackId")
    artist_name: str | None = Field(default=None, alias="artistName")
    collection_name: str | None = Field(default=None, alias="collectionName")
    track_name: str | None = Field(default=None, alias="trackName")
    collection_view_url: str | None = Field(default=None, alias="collectionViewUrl")
    track_view_url: str | None = Field(default=None, alias="trackViewUrl")
    feed_url: str | None = Field(default=None, alias="feedUrl")
    artwork_url_600: str | None = Field(default=None, alias="artworkUrl600")
    artwork_url_160: str | None = Field(default=None, alias="artworkUrl160")
    artwork_url_100: str | None = Field(default=None, alias="artworkUrl100")
    release_date: str | None = Field(default=None, alias="releaseDate")
    track_count: int | None = Field(default=None, alias="trackCount")
    track_time_millis: int | None = Field(default=None, alias="trackTimeMillis")
    primary_genre_name: str | None = Field(default=None, alias="primaryGenreName")
    genres: list[str | dict[str, str]] = Field(default_factory=list)
    content_advisory_rating: str | None = Field(default=None, alias="contentAdvisoryRating")
    description: str | None = None
    short_description: str | None = Field(default=None, alias="shortDescription")
    episode_url: str | None = Field(default=None, alias="episodeUrl")

    @property
    def is_episode(self) -> bool:
        return self.wrapper_type == "podcastEpisode"


class ITunesLookup(ITunesBaseModel):
    result_count: int = Field(default=0, alias="resultCount")
    results: list[ITunesResult] = Field(default_factory=list)
