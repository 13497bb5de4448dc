"""IGDB ``games`` endpoint schemas."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class IgdbBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "IGDB"


class IgdbNamed(IgdbBaseModel):
    id: int
    name: str


class IgdbImage(IgdbBaseModel):
    id: int | None = None
    image_id: str


class IgdbVideo(IgdbBaseModel):
    id: int | None = None
    video_id: str
    name: str | None = None


class IgdbInvolvedCompany(IgdbBaseModel):
    id: int | None = None
    company: IgdbNamed
    developer: bool = False
    publisher: bool = False
    porting: bool = False
    supporting: bool = False


class IgdbSimilarGame(IgdbBaseModel):
    id: int
    name: str | None = None
    cover: IgdbImage | None = None


class IgdbGame(IgdbBaseModel):
    id: int
    name: str
    summary: str | None = None
    storyline: str | None = None
    url: str | None = None
    first_release_date: int | None = None
    total_rating: float | None = None
    cover: IgdbImage | None = None
    artworks: list[IgdbImage] = Field(default_factory=list)
    screenshots: list[IgdbImage] = Field(default_factory=list)
    videos: list[IgdbVideo] = Field(default_factory=list)
    genres: list[IgdbNamed] = Field(default_factory=list)
    themes: list[IgdbNamed] = Field(default_factory=list)
    platforms: list[IgdbNamed] = Field(default_factory=list)
    involved_companies: list[IgdbInvolvedCompany] = Field(default_factory=list)
    similar_games: list[IgdbSimilarGame] = Field(default_factory=list)
    collection: IgdbNamed | None = None
    franchise: IgdbNamed | None = None
