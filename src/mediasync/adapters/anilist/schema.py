"""AniList GraphQL response schemas."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel

type AniListMediaType = Literal["ANIME", "MANGA"]


class AniListBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "AniList"


class AniListTitle(AniListBaseModel):
    user_preferred: str | None = Field(default=None, alias="userPreferred")
    english: str | None = None
    romaji: str | None = None
    native: str | None = None

    @property
    def best(self) -> str | None:
        return self.user_preferred or self.english or self.romaji or self.native


class AniListImage(AniListBaseModel):
    extra_large: str | None = Field(default=None, alias="extraLarge")
    large: str | None = None
    medium: str | None = None


class AniListFuzzyDate(AniListBaseModel):
    year: int | None = None
    month: int | None = None
    day: int | None = None


class AniListStaffName(AniListBaseModel):
    full: str | None = None


class AniListStaff(AniListBaseModel):
    id: int
    name: AniListStaffName
    image: AniListImage | None = None


class AniListStaffEdge(AniListBaseModel):
    role: str | None = None
    node: AniListStaff


class AniListStaffConnection(AniListBaseModel):
    edges: list[AniListStaffEdge] = Field(default_factory=list)


class AniListStudio(AniListBaseModel):
    id: int
    name: str


class AniListStudioEdge(AniListBaseModel):
    is_main: bool | None = Field(default=None, alias="isMain")
    node: AniListStudio


class AniListStudioConnection(AniListBaseModel):
    edges: list[AniListStudioEdge] = Field(default_factory=list)


class AniListTrailer(AniListBaseModel):
    id: str | None = None
    site: str | None = None


class AniListMediaSummary(AniListBaseModel):
    id: int
    type: AniListMediaType | None = None
    title: AniListTitle | None = None
    cover_image: AniListImage | None = Field(default=None, alias="coverImage")


class AniListRecommendation(AniListBaseModel):
    media_recommendation: AniListMediaSummary | None = Field(
        default=None, alias="mediaRecommendation"
    )


class AniListRecommendationConnection(AniListBaseModel):
    nodes: list[AniListRecommendation] = Field(default_factory=list)


class AniListMedia(AniListBaseModel):
    id: int
    type: AniListMediaType
    title: AniListTitle
    description: str | None = None
    is_adult: bool | None = Field(default=None, alias="isAdult")
    site_url: str | None = Field(default=None, alias="siteUrl")
    cover_image: AniListImage | None = Field(default=None, alias="coverImage")
    banner_image: str | None = Field(default=None, alias="bannerImage")
    start_date: AniListFuzzyDate | None = Field(default=None, alias="startDate")
    genres: list[str] = Field(default_factory=list)
    average_score: int | None = Field(default=None, alias="averageScore")
    episodes: int | None = None
    volumes: int | None = None
    chapters: int | None = None
    staff: AniListStaffConnection | None = None
    studios: AniListStudioConnection | None = None
    trailer: AniListTrailer | None = None
    recommendations: AniListRecommendationConnection | None = None
