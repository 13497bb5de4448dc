"""OpenLibrary provider: works, editions, authors and related works."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

import httpx

from mediasync.adapters.provider_base import (
    HttpProvider,
    json_object,
    require_lot,
    validate_payload,
)
from mediasync.config.openlibrary import OpenLibraryConfig, get_openlibrary_config
from mediasync.domain.model import MediaLot, MediaSource

from .schema import OpenLibraryAuthorRole, OpenLibraryIsbnLookup
from .translator import key_tail, translate_book

if TYPE_CHECKING:
    from mediasync.adapters.http_resilience import ResilientClient
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

log = getLogger(__name__)

RELATED_WORKS_COMPONENT = "RelatedWorkCarousel"


class OpenLibraryProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.OPENLIBRARY
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.BOOK})

    def __init__(
        self,
        *,
        config: OpenLibraryConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or get_openlibrary_config()
        super().__init__(resilience=self._config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        client = self._client()
        work = json_object(await client.get(f"works/{identifier}.json"), source=self.source)
        editions, credits, related_html = await asyncio.gather(
            self._editions(client, identifier),
            self._credits(client, work),
            self._related_html(client, identifier),
        )
        return {
            "work": work,
            "editions": editions,
            "credits": credits,
            "related_html": related_html,
        }

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_book(
            raw,
            cover_base_url=self._config.cover_base_url,
            cover_size=self._config.cover_size,
        )

    async def id_from_isbn(self, isbn: str) -> str | None:
        """Return the work id for ``isbn``, or ``None`` when OpenLibrary does not know it."""

        client = self._client()
        response = await client.get(f"isbn/{isbn}.json")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        payload = json_object(response, source=self.source)
        lookup = validate_payload(OpenLibraryIsbnLookup, payload, source=self.source)
        if not lookup.works:
            return None
        return key_tail(lookup.works[0].key)

    async def _editions(self, client: ResilientClient, identifier: str) -> list[object]:
        payload = json_object(
            await client.get(f"works/{identifier}/editions.json"), source=self.source
        )
        entries = payload.get("entries")
        return entries if isinstance(entries, list) else []

    async def _credits(self, client: ResilientClient, work: RawPayload) -> list[RawPayload]:
        roles = [
            OpenLibraryAuthorRole.model_validate(entry)
            for entry in work.get("authors") or []
            if isinstance(entry, dict)
        ]

        async def fetch_author(role: OpenLibraryAuthorRole) -> RawPayload | None:
            key = role.author_key
            if key is None:
                return None
            author = json_object(await client.get(f"{key.strip('/')}.json"), source=self.source)
            return {"role": role.type.key if role.type else None, "author": author}

        credits = await asyncio.gather(*(fetch_author(role) for role in roles))
        return [credit for credit in credits if credit is not None]

    async def _related_html(self, client: ResilientClient, identifier: str) -> str | None:
        response = await client.get(
            "partials.json",
            params={"workid": identifier, "_component": RELATED_WORKS_COMPONENT},
        )
        payload = json_object(response, source=self.source)
        html = payload.get("0")
        if not isinstance(html, str):
            log.debug("OpenLibrary %s: no related works fragment", identifier)
            return None
        return html
