"""iTunes provider: podcast lookup with its most recent episodes."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from mediasync.adapters.provider_base import HttpProvider, json_object, require_lot
from mediasync.config.itunes import ITunesConfig, get_itunes_config
from mediasync.domain.errors import FetchError
from mediasync.domain.model import MediaLot, MediaSource

from .translator import translate_podcast

if TYPE_CHECKING:
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape


class ITunesProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.ITUNES
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.PODCAST})

    def __init__(
        self,
        *,
        config: ITunesConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or get_itunes_config()
        super().__init__(resilience=self._config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        params = {
            "id": identifier,
            "media": "podcast",
            "entity": "podcastEpisode",
            "limit": self._config.episode_limit,
        }
        client = self._client()
        payload = json_object(await client.get("lookup", params=params), source=self.source)
        # The lookup endpoint answers unknown ids with an empty result list.
        if not payload.get("results"):
            raise FetchError(
                FetchError.Kind.NOT_FOUND,
                f"{self.source} {identifier}: no such podcast",
                source=self.source.value,
            )
        return payload

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_podcast(raw)
