"""Public interface for the OpenLibrary adapter."""

from __future__ import annotations

from .client import OpenLibraryProvider
from .schema import OpenLibraryBundle, OpenLibraryWork
from .translator import parse_publish_date, parse_related_works, translate_book

__all__ = [
    "OpenLibraryBundle",
    "OpenLibraryProvider",
    "OpenLibraryWork",
    "parse_publish_date",
    "parse_related_works",
    "translate_book",
]
