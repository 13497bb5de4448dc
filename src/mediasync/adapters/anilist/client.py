"""AniList provider: a single GraphQL ``Media`` query per identifier."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Final

import httpx

from mediasync.adapters.provider_base import HttpProvider, json_object, malformed, require_lot
from mediasync.config.anilist import AniListConfig, get_anilist_config
from mediasync.config.http_resilience import RetryablePayloadError
from mediasync.domain.errors import FetchError
from mediasync.domain.model import MediaLot, MediaSource

from .translator import MEDIA_TYPES, translate_media

if TYPE_CHECKING:
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

log = getLogger(__name__)

MEDIA_QUERY: Final[str] = """
query ($id: Int!, $type: MediaType) {
  Media(id: $id, type: $type) {
    id
    type
    title { userPreferred english romaji native }
    description(asHtml: false)
    isAdult
    siteUrl
    coverImage { extraLarge }
    bannerImage
    startDate { year month day }
    genres
    averageScore
    episodes
    volumes
    chapters
    trailer { id site }
    staff { edges { role node { id name { full } image { large } } } }
    studios { edges { isMain node { id name } } }
    recommendations {
      nodes { mediaRecommendation { id type title { userPreferred } coverImage { extraLarge } } }
    }
  }
}
"""


async def raise_on_throttled_payload(response: httpx.Response) -> None:
    """AniList sometimes reports throttling in the GraphQL error list only."""

    if response.status_code != httpx.codes.OK:
        return
    await response.aread()
    try:
        payload = response.json()
    except ValueError:
        return
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not errors:
        return
    messages = [str(error.get("message", "")) for error in errors if isinstance(error, dict)]
    if any("Too Many Requests" in message for message in messages):
        raise RetryablePayloadError("AniList throttled the request", response=response)


class AniListProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.ANILIST
    lots: ClassVar[frozenset[MediaLot]] = frozenset(MEDIA_TYPES)

    def __init__(
        self,
        *,
        config: AniListConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        config = config or get_anilist_config()
        resilience = replace(
            config.resilience,
            response_hooks=(*config.resilience.response_hooks, raise_on_throttled_payload),
        )
        super().__init__(resilience=resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        try:
            media_id = int(identifier)
        except ValueError:
            raise FetchError(
                FetchError.Kind.INVALID_IDENTIFIER,
                f"{self.source}: {identifier!r} is not a numeric id",
                source=self.source.value,
            ) from None

        body = {
            "query": MEDIA_QUERY,
            "variables": {"id": media_id, "type": MEDIA_TYPES[shape.lot]},
        }
        client = self._client()
        payload = json_object(await client.post("", json=body), source=self.source)

        data = payload.get("data")
        media = data.get("Media") if isinstance(data, dict) else None
        if isinstance(media, dict):
            return media
        errors = payload.get("errors") or []
        if any(isinstance(error, dict) and error.get("status") == 404 for error in errors):
            raise FetchError(
                FetchError.Kind.NOT_FOUND,
                f"{self.source} {identifier}: no such {shape.lot}",
                source=self.source.value,
                status_code=404,
            )
        raise malformed(self.source, f"media {identifier}: response has no Media object")

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_media(raw, lot)
