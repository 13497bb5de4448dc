"""TMDB provider: movie and TV details with credits, videos and recommendations."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from mediasync.adapters.provider_base import HttpProvider, json_object, require_lot
from mediasync.config.tmdb import TmdbConfig, get_tmdb_config
from mediasync.domain.model import MediaLot, MediaSource

from .translator import translate_movie, translate_show

if TYPE_CHECKING:
    from mediasync.adapters.http_resilience import ResilientClient
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

log = getLogger(__name__)

APPENDED_RESOURCES = "credits,videos,recommendations"


class TmdbProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.TMDB
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.MOVIE, MediaLot.SHOW})

    def __init__(
        self,
        *,
        config: TmdbConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or get_tmdb_config()
        super().__init__(resilience=self._config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        params = {
            "append_to_response": APPENDED_RESOURCES,
            "language": self._config.language,
        }
        client = self._client()
        if shape.lot is MediaLot.MOVIE:
            response = await client.get(f"movie/{identifier}", params=params)
            return json_object(response, source=self.source)

        response = await client.get(f"tv/{identifier}", params=params)
        payload = json_object(response, source=self.source)
        payload["season_details"] = await self._fetch_seasons(client, identifier, payload)
        return payload

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        image_base_url = self._config.image_base_url
        if lot is MediaLot.MOVIE:
            return translate_movie(raw, image_base_url=image_base_url)
        return translate_show(raw, image_base_url=image_base_url)

    async def _fetch_seasons(
        self, client: ResilientClient, show_id: str, show: RawPayload
    ) -> list[RawPayload]:
        numbers = [
            season["season_number"]
            for season in show.get("seasons") or []
            if isinstance(season, dict) and isinstance(season.get("season_number"), int)
        ]
        log.debug("TMDB show %s: fetching %d seasons", show_id, len(numbers))

        async def fetch_season(number: int) -> RawPayload:
            response = await client.get(
                f"tv/{show_id}/season/{number}", params={"language": self._config.language}
            )
            return json_object(response, source=self.source)

        return list(await asyncio.gather(*(fetch_season(number) for number in numbers)))
