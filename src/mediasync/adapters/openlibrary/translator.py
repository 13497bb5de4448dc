"""Translate OpenLibrary bundles into normalized book records."""

from __future__ import annotations

import string
from datetime import date, datetime
from statistics import mean
from typing import TYPE_CHECKING, Final

from bs4 import BeautifulSoup

from mediasync.adapters.provider_base import malformed, text_or_none, unique, validate_payload
from mediasync.config.openlibrary import DEFAULT_OPENLIBRARY_COVER_URL
from mediasync.domain.media_updates import NormalizedRecord
from mediasync.domain.model import (
    BookSpecifics,
    CreatorCredit,
    CreatorGroup,
    MediaAssets,
    MediaLot,
    MediaSource,
    Suggestion,
)

from .schema import OpenLibraryBundle, OpenLibraryTypedText

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mediasync.domain.ports import RawPayload

    from .schema import OpenLibraryCredit, OpenLibraryEdition

SOURCE: Final = MediaSource.OPENLIBRARY
WEB_URL: Final[str] = "https://openlibrary.org"
DEFAULT_ROLE: Final[str] = "Author"
GENERIC_ROLE_KEY: Final[str] = "/type/author_role"
PUBLISH_DATE_FORMATS: Final[tuple[str, ...]] = ("%b %d, %Y", "%Y", "%B %d, %Y")


def key_tail(key: str) -> str:
    """``/works/OL45883W`` -> ``OL45883W``."""

    return key.rstrip("/").rsplit("/", 1)[-1]


def cover_url(kind: str, cover_id: int, *, base_url: str, size: str) -> str:
    return f"{base_url.rstrip('/')}/{kind}/id/{cover_id}-{size}.jpg?default=false"


def parse_publish_date(value: str | None) -> date | None:
    text = text_or_none(value)
    if text is None:
        return None
    for fmt in PUBLISH_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def translate_book(
    raw: RawPayload,
    *,
    cover_base_url: str = DEFAULT_OPENLIBRARY_COVER_URL,
    cover_size: str = "M",
) -> NormalizedRecord:
    bundle = validate_payload(OpenLibraryBundle, raw, source=SOURCE)
    work = bundle.work
    identifier = key_tail(work.key)
    title = text_or_none(work.title)
    if not identifier or title is None:
        raise malformed(SOURCE, f"work {work.key!r} has no identifier or title")

    description = work.description
    if isinstance(description, OpenLibraryTypedText):
        description = description.value

    cover_ids = [
        *work.covers,
        *(cover for edition in bundle.editions for cover in edition.covers),
    ]
    images = unique(
        cover_url("b", cover_id, base_url=cover_base_url, size=cover_size)
        for cover_id in cover_ids
        if cover_id > 0
    )
    publish_dates = [
        parsed
        for edition in bundle.editions
        if (parsed := parse_publish_date(edition.publish_date)) is not None
    ]
    return NormalizedRecord(
        source=SOURCE,
        identifier=identifier,
        lot=MediaLot.BOOK,
        title=title,
        specifics=BookSpecifics(pages=_mean_pages(bundle.editions)),
        description=text_or_none(description),
        source_url=f"{WEB_URL}/works/{identifier}",
        publish_year=min(publish_dates).year if publish_dates else None,
        genres=set(_genres(work.subjects)),
        creators=_creators(bundle.credits, cover_base_url=cover_base_url, cover_size=cover_size),
        assets=MediaAssets(images=images),
        suggestions=parse_related_works(bundle.related_html),
    )


def parse_related_works(html: str | None) -> list[Suggestion]:
    """Read suggestions out of the related-works carousel fragment."""

    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    suggestions: list[Suggestion] = []
    for item in soup.select(".book.carousel__item"):
        link = item.select_one("a[href]")
        cover = item.select_one("img.bookcover")
        if link is None or cover is None:
            continue
        alt = cover.get("alt")
        href = link.get("href")
        if not isinstance(alt, str) or not isinstance(href, str):
            continue
        title = alt.split(" by ", 1)[0].strip()
        if not title:
            continue
        src = cover.get("src")
        suggestions.append(
            Suggestion(
                lot=MediaLot.BOOK,
                source=SOURCE,
                identifier=key_tail(href),
                title=title,
                image=src if isinstance(src, str) else None,
            )
        )
    return suggestions


def _mean_pages(editions: Iterable[OpenLibraryEdition]) -> int | None:
    pages = [edition.number_of_pages for edition in editions if edition.number_of_pages]
    if not pages:
        return None
    return int(mean(pages))


def _genres(subjects: Iterable[str]) -> list[str]:
    return [
        string.capwords(part)
        for subject in subjects
        for part in subject.split(", ")
        if part.strip()
    ]


def _creators(
    credits: Iterable[OpenLibraryCredit], *, cover_base_url: str, cover_size: str
) -> list[CreatorGroup]:
    groups: dict[str, list[CreatorCredit]] = {}
    for credit in credits:
        photo = next((photo for photo in credit.author.photos if photo > 0), None)
        image = (
            cover_url("a", photo, base_url=cover_base_url, size=cover_size)
            if photo is not None
            else None
        )
        groups.setdefault(_role_name(credit.role), []).append(
            CreatorCredit(
                name=credit.author.name,
                image=image,
                person_id=key_tail(credit.author.key),
            )
        )
    return [CreatorGroup(name=role, items=items) for role, items in groups.items()]


def _role_name(role_key: str | None) -> str:
    if not role_key or role_key == GENERIC_ROLE_KEY:
        return DEFAULT_ROLE
    return string.capwords(key_tail(role_key).replace("_", " "))
