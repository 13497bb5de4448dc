"""VNDB provider: a single filtered ``POST vn`` per identifier."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, ClassVar, Final

from mediasync.adapters.provider_base import HttpProvider, json_object, malformed, require_lot
from mediasync.config.vndb import VndbConfig, get_vndb_config
from mediasync.domain.errors import FetchError
from mediasync.domain.model import MediaLot, MediaSource

from .translator import translate_visual_novel

if TYPE_CHECKING:
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

VN_FIELDS: Final[str] = ", ".join(
    (
        "title",
        "alttitle",
        "description",
        "released",
        "rating",
        "length_minutes",
        "platforms",
        "image.url",
        "image.sexual",
        "screenshots.url",
        "developers.name",
        "tags.name",
        "tags.rating",
        "tags.spoiler",
    )
)
_VN_ID = re.compile(r"^v?(\d+)$")


def vn_id(identifier: str) -> str:
    """Accept ``17`` or ``v17``; VNDB ids are always ``v``-prefixed."""

    match = _VN_ID.match(identifier.strip().lower())
    if match is None:
        raise FetchError(
            FetchError.Kind.INVALID_IDENTIFIER,
            f"vndb: {identifier!r} is not a visual novel id",
            source=MediaSource.VNDB.value,
        )
    return f"v{match.group(1)}"


class VndbProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.VNDB
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.VISUAL_NOVEL})

    def __init__(
        self,
        *,
        config: VndbConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        config = config or get_vndb_config()
        super().__init__(resilience=config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        body = {"filters": ["id", "=", vn_id(identifier)], "fields": VN_FIELDS}
        client = self._client()
        payload = json_object(await client.post("vn", json=body), source=self.source)
        results = payload.get("results")
        if not isinstance(results, list):
            raise malformed(self.source, "response has no results list")
        if not results:
            raise FetchError(
                FetchError.Kind.NOT_FOUND,
                f"{self.source} {identifier}: no such visual novel",
                source=self.source.value,
            )
        return results[0]

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_visual_novel(raw)
