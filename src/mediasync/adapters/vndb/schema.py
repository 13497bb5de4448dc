"""VNDB kana API ``/vn`` schemas."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class VndbBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "VNDB"


class VndbImage(VndbBaseModel):
    url: str
    sexual: float | None = None
    violence: float | None = None


class VndbDeveloper(VndbBaseModel):
    id: str
    name: str


class VndbTag(VndbBaseModel):
    id: str | None = None
    name: str
    rating: float | None = None
    spoiler: int = 0


class VndbScreenshot(VndbBaseModel):
    url: str
    sexual: float | None = None


class VndbVisualNovel(VndbBaseModel):
    id: str
    title: str
    alttitle: str | None = None
    description: str | None = None
    released: str | None = None
    rating: float | None = None
    length_minutes: int | None = None
    platforms: list[str] = Field(default_factory=list)
    image: VndbImage | None = None
    screenshots: list[VndbScreenshot] = Field(default_factory=list)
    developers: list[VndbDeveloper] = Field(default_factory=list)
    tags: list[VndbTag] = Field(default_factory=list)


class VndbResults(VndbBaseModel):
    results: list[VndbVisualNovel] = Field(default_factory=list)
    more: bool = False
