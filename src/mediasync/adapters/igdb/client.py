"""IGDB provider: one apicalypse query against the ``games`` endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Final

from mediasync.adapters.provider_base import HttpProvider, malformed, require_lot
from mediasync.config.igdb import IgdbConfig, get_igdb_config
from mediasync.domain.errors import FetchError
from mediasync.domain.model import MediaLot, MediaSource

from .translator import translate_game

if TYPE_CHECKING:
    import httpx

    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

GAME_FIELDS: Final[tuple[str, ...]] = (
    "id",
    "name",
    "summary",
    "storyline",
    "url",
    "first_release_date",
    "total_rating",
    "cover.image_id",
    "artworks.image_id",
    "screenshots.image_id",
    "videos.video_id",
    "genres.name",
    "themes.name",
    "platforms.name",
    "involved_companies.company.name",
    "involved_companies.developer",
    "involved_companies.publisher",
    "similar_games.name",
    "similar_games.cover.image_id",
    "collection.name",
    "franchise.name",
)


def game_query(game_id: int) -> str:
    return f"fields {','.join(GAME_FIELDS)}; where id = {game_id};"


class IgdbProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.IGDB
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.VIDEO_GAME})

    def __init__(
        self,
        *,
        config: IgdbConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or get_igdb_config()
        super().__init__(resilience=self._config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        if not identifier.isdigit():
            raise FetchError(
                FetchError.Kind.INVALID_IDENTIFIER,
                f"{self.source}: {identifier!r} is not a numeric id",
                source=self.source.value,
            )
        client = self._client()
        response = await client.post("games", content=game_query(int(identifier)))
        games = self._json_list(response)
        if not games:
            raise FetchError(
                FetchError.Kind.NOT_FOUND,
                f"{self.source} {identifier}: no such game",
                source=self.source.value,
            )
        game = games[0]
        if not isinstance(game, dict):
            raise malformed(self.source, f"game {identifier} is not a JSON object")
        return game

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_game(
            raw,
            image_base_url=self._config.image_base_url,
            image_size=self._config.image_size,
        )

    def _json_list(self, response: httpx.Response) -> list[object]:
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise malformed(self.source, "response is not JSON") from exc
        if not isinstance(payload, list):
            raise malformed(self.source, "expected a JSON array")
        return payload
