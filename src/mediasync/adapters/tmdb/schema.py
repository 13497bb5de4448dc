"""TMDB response schemas for movie and TV details."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class TmdbBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "TMDB"


class TmdbGenre(TmdbBaseModel):
    id: int
    name: str


class TmdbCompany(TmdbBaseModel):
    id: int
    name: str
    logo_path: str | None = None
    origin_country: str | None = None


class TmdbPerson(TmdbBaseModel):
    id: int
    name: str
    profile_path: str | None = None
    gender: int | None = None
    known_for_department: str | None = None
    original_name: str | None = None
    popularity: float | None = None
    adult: bool | None = None
    credit_id: str | None = None


class TmdbCastMember(TmdbPerson):
    character: str | None = None
    order: int | None = None
    cast_id: int | None = None


class TmdbCrewMember(TmdbPerson):
    job: str | None = None
    department: str | None = None


class TmdbCredits(TmdbBaseModel):
    id: int | None = None
    cast: list[TmdbCastMember] = Field(default_factory=list)
    crew: list[TmdbCrewMember] = Field(default_factory=list)


class TmdbVideo(TmdbBaseModel):
    key: str
    site: str
    id: str | None = None
    name: str | None = None
    type: str | None = None
    official: bool | None = None
    size: int | None = None
    iso_639_1: str | None = None
    iso_3166_1: str | None = None
    published_at: str | None = None


class TmdbVideos(TmdbBaseModel):
    results: list[TmdbVideo] = Field(default_factory=list)


class TmdbRecommendation(TmdbBaseModel):
    id: int
    title: str | None = None
    name: str | None = None
    poster_path: str | None = None
    media_type: str | None = None
    adult: bool | None = None


class TmdbRecommendations(TmdbBaseModel):
    page: int | None = None
    results: list[TmdbRecommendation] = Field(default_factory=list)
    total_pages: int | None = None
    total_results: int | None = None


class TmdbCollection(TmdbBaseModel):
    id: int
    name: str
    poster_path: str | None = None
    backdrop_path: str | None = None


class _TmdbTitle(TmdbBaseModel):
    id: int
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    adult: bool | None = None
    homepage: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    popularity: float | None = None
    original_language: str | None = None
    status: str | None = None
    tagline: str | None = None
    genres: list[TmdbGenre] = Field(default_factory=list)
    production_companies: list[TmdbCompany] = Field(default_factory=list)
    credits: TmdbCredits | None = None
    videos: TmdbVideos | None = None
    recommendations: TmdbRecommendations | None = None


class TmdbMovie(_TmdbTitle):
    title: str
    original_title: str | None = None
    release_date: str | None = None
    runtime: int | None = None
    imdb_id: str | None = None
    video: bool | None = None
    budget: int | None = None
    revenue: int | None = None
    belongs_to_collection: TmdbCollection | None = None


class TmdbEpisode(TmdbBaseModel):
    id: int
    name: str
    episode_number: int
    season_number: int | None = None
    overview: str | None = None
    air_date: str | None = None
    still_path: str | None = None
    runtime: int | None = None
    vote_average: float | None = None
    vote_count: int | None = None


class TmdbSeasonSummary(TmdbBaseModel):
    id: int
    season_number: int
    name: str
    overview: str | None = None
    poster_path: str | None = None
    air_date: str | None = None
    episode_count: int | None = None
    vote_average: float | None = None


class TmdbSeason(TmdbSeasonSummary):
    episodes: list[TmdbEpisode] = Field(default_factory=list)


class TmdbShow(_TmdbTitle):
    name: str
    original_name: str | None = None
    first_air_date: str | None = None
    last_air_date: str | None = None
    number_of_seasons: int | None = None
    number_of_episodes: int | None = None
    created_by: list[TmdbPerson] = Field(default_factory=list)
    networks: list[TmdbCompany] = Field(default_factory=list)
    seasons: list[TmdbSeasonSummary] = Field(default_factory=list)
    # Filled by the client from the per-season endpoint.
    season_details: list[TmdbSeason] = Field(default_factory=list)
