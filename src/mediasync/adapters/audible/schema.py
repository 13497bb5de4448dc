"""Audible catalog API schemas."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class AudibleBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "Audible"


class AudiblePerson(AudibleBaseModel):
    name: str
    asin: str | None = None


class AudibleSeries(AudibleBaseModel):
    asin: str
    title: str
    sequence: str | None = None


class AudibleCategory(AudibleBaseModel):
    id: str | None = None
    name: str


class AudibleCategoryLadder(AudibleBaseModel):
    ladder: list[AudibleCategory] = Field(default_factory=list)
    root: str | None = None


class AudibleRatingSummary(AudibleBaseModel):
    average_rating: float | None = None
    display_average_rating: str | None = None
    num_ratings: int | None = None


class AudibleRating(AudibleBaseModel):
    overall_distribution: AudibleRatingSummary | None = None


class AudibleProduct(AudibleBaseModel):
    asin: str
    title: str | None = None
    subtitle: str | None = None
    authors: list[AudiblePerson] = Field(default_factory=list)
    narrators: list[AudiblePerson] = Field(default_factory=list)
    publisher_name: str | None = None
    publisher_summary: str | None = None
    merchandising_summary: str | None = None
    release_date: str | None = None
    runtime_length_min: int | None = None
    is_adult_product: bool | None = None
    language: str | None = None
    format_type: str | None = None
    content_type: str | None = None
    product_images: dict[str, str] = Field(default_factory=dict)
    rating: AudibleRating | None = None
    series: list[AudibleSeries] = Field(default_factory=list)
    category_ladders: list[AudibleCategoryLadder] = Field(default_factory=list)


class AudibleBundle(AudibleBaseModel):
    product: AudibleProduct
    similar_products: list[AudibleProduct] = Field(default_factory=list)
