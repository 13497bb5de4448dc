"""OpenLibrary response schemas.

``fetch_raw`` stitches several upstream documents into one ``OpenLibraryBundle``
so the translator can stay free of I/O.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from mediasync.adapters.provider_base import ProviderBaseModel


class OpenLibraryBaseModel(ProviderBaseModel):
    provider_name: ClassVar[str] = "OpenLibrary"


class OpenLibraryKey(OpenLibraryBaseModel):
    key: str


class OpenLibraryTypedText(OpenLibraryBaseModel):
    type: str | None = None
    value: str


class OpenLibraryAuthorRole(OpenLibraryBaseModel):
    """``authors`` entry: either a flat ``{key}`` or ``{author: {key}, type: {key}}``."""

    key: str | None = None
    author: OpenLibraryKey | None = None
    type: OpenLibraryKey | None = None

    @property
    def author_key(self) -> str | None:
        if self.author is not None:
            return self.author.key
        return self.key


class OpenLibraryWork(OpenLibraryBaseModel):
    key: str
    title: str
    description: str | OpenLibraryTypedText | None = None
    covers: list[int] = Field(default_factory=list)
    authors: list[OpenLibraryAuthorRole] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)
    subject_places: list[str] | None = None
    subject_people: list[str] | None = None
    subject_times: list[str] | None = None
    first_publish_date: str | None = None
    links: list[dict[str, object]] | None = None
    excerpts: list[dict[str, object]] | None = None
    revision: int | None = None
    latest_revision: int | None = None
    created: OpenLibraryTypedText | None = None
    last_modified: OpenLibraryTypedText | None = None


class OpenLibraryEdition(OpenLibraryBaseModel):
    key: str | None = None
    title: str | None = None
    publish_date: str | None = None
    number_of_pages: int | None = None
    covers: list[int] = Field(default_factory=list)
    publishers: list[str] | None = None
    isbn_10: list[str] | None = None
    isbn_13: list[str] | None = None
    languages: list[OpenLibraryKey] | None = None


class OpenLibraryEditions(OpenLibraryBaseModel):
    entries: list[OpenLibraryEdition] = Field(default_factory=list)
    size: int | None = None
    links: dict[str, object] | None = None


class OpenLibraryAuthor(OpenLibraryBaseModel):
    key: str
    name: str
    photos: list[int] = Field(default_factory=list)
    personal_name: str | None = None
    birth_date: str | None = None
    death_date: str | None = None
    bio: str | OpenLibraryTypedText | None = None


class OpenLibraryCredit(OpenLibraryBaseModel):
    """Author document joined with the role it has on the work."""

    role: str | None = None
    author: OpenLibraryAuthor


class OpenLibraryBundle(OpenLibraryBaseModel):
    work: OpenLibraryWork
    editions: list[OpenLibraryEdition] = Field(default_factory=list)
    credits: list[OpenLibraryCredit] = Field(default_factory=list)
    related_html: str | None = None


class OpenLibraryIsbnLookup(OpenLibraryBaseModel):
    works: list[OpenLibraryKey] = Field(default_factory=list)
