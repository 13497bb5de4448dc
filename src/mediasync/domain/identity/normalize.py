"""Title normalization used for identity matching and bucketing."""

from __future__ import annotations

import re
import unicodedata
from typing import Final

BUCKET_LENGTH: Final[int] = 3
_LEADING_ARTICLES: Final[tuple[str, ...]] = ("the ", "a ", "an ")
_APOSTROPHES = re.compile(r"['’`]")
_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Fold a title to a comparison key.

    >>> normalize_title("The Lord of the Rings: Fellowship & Friends")
    'lord of the rings fellowship and friends'
    """

    decomposed = unicodedata.normalize("NFKD", title)
    text = "".join(char for char in decomposed if not unicodedata.combining(char))
    text = text.casefold().replace("&", " and ")
    text = _APOSTROPHES.sub("", text)
    text = _NON_WORD.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    for article in _LEADING_ARTICLES:
        if text.startswith(article) and len(text) > len(article):
            return text[len(article) :]
    return text


def title_bucket(title: str) -> str:
    """Coarse key that serializes identity resolution for similar titles."""

    return normalize_title(title)[:BUCKET_LENGTH]
