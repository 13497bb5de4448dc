"""Translate Audible catalog products into normalized audiobook records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from bs4 import BeautifulSoup

from mediasync.adapters.provider_base import (
    malformed,
    parse_iso_date,
    text_or_none,
    unique,
    validate_payload,
)
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    AudioBookSpecifics,
    CreatorCredit,
    CreatorGroup,
    MediaAssets,
    MediaGroup,
    MediaLot,
    MediaSource,
    Suggestion,
)

from .schema import AudibleBundle

if TYPE_CHECKING:
    from mediasync.domain.ports import RawPayload

    from .schema import AudiblePerson, AudibleProduct, AudibleSeries

SOURCE: Final = MediaSource.AUDIBLE
DEFAULT_PRODUCT_URL: Final[str] = "https://www.audible.com/pd/"


def translate_audiobook(
    raw: RawPayload, *, product_url_base: str = DEFAULT_PRODUCT_URL
) -> NormalizedRecord:
    bundle = validate_payload(AudibleBundle, raw, source=SOURCE)
    product = bundle.product
    title = text_or_none(product.title)
    if title is None:
        raise malformed(SOURCE, f"product {product.asin} has no title")

    rating = product.rating.overall_distribution if product.rating else None
    return NormalizedRecord(
        source=SOURCE,
        identifier=product.asin,
        lot=MediaLot.AUDIO_BOOK,
        title=title,
        specifics=AudioBookSpecifics(runtime=product.runtime_length_min),
        description=_plain_text(product.publisher_summary or product.merchandising_summary),
        source_url=f"{product_url_base}{product.asin}",
        provider_rating=rating.average_rating if rating else None,
        publish_date=parse_iso_date(product.release_date),
        is_nsfw=product.is_adult_product,
        genres={
            category.name
            for ladder in product.category_ladders
            for category in ladder.ladder
        },
        creators=_creators(product),
        assets=MediaAssets(images=_images(product)),
        group=_series_group(product.series),
        suggestions=[
            Suggestion(
                lot=MediaLot.AUDIO_BOOK,
                source=SOURCE,
                identifier=similar.asin,
                title=similar.title,
                image=next(iter(_images(similar)), None),
            )
            for similar in bundle.similar_products
            if similar.title
        ],
    )


def _plain_text(html: str | None) -> str | None:
    if not html:
        return None
    return text_or_none(BeautifulSoup(html, "html.parser").get_text(" ", strip=True))


def _images(product: AudibleProduct) -> list[str]:
    # Keys are pixel sizes; largest first.
    sizes = sorted(product.product_images, key=lambda size: int(size) if size.isdigit() else 0)
    return unique(product.product_images[size] for size in reversed(sizes))


def _creators(product: AudibleProduct) -> list[CreatorGroup]:
    def group(role: str, people: list[AudiblePerson]) -> CreatorGroup | None:
        if not people:
            return None
        return CreatorGroup(
            name=role,
            items=[CreatorCredit(name=person.name, person_id=person.asin) for person in people],
        )

    groups = [group("Author", product.authors), group("Narrator", product.narrators)]
    if product.publisher_name:
        groups.append(
            CreatorGroup(name="Publisher", items=[CreatorCredit(name=product.publisher_name)])
        )
    return [item for item in groups if item is not None]


def _series_group(series: list[AudibleSeries]) -> MediaGroup | None:
    if not series:
        return None
    first = series[0]
    part = None
    if first.sequence and first.sequence.isdigit():
        part = int(first.sequence)
    return MediaGroup(identifier=first.asin, name=first.title, part=part)
