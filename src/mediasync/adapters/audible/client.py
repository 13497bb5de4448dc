"""Audible provider: catalog product details plus same-series suggestions."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Final

from mediasync.adapters.provider_base import HttpProvider, json_object, require_lot
from mediasync.config.audible import AudibleConfig, get_audible_config
from mediasync.domain.errors import FetchError
from mediasync.domain.model import MediaLot, MediaSource

from .translator import translate_audiobook

if TYPE_CHECKING:
    from mediasync.adapters.http_resilience import ResilientClient
    from mediasync.adapters.provider_base import ClientFactory
    from mediasync.domain.media_updates import NormalizedRecord
    from mediasync.domain.ports import RawPayload, RequestShape

RESPONSE_GROUPS: Final[str] = ",".join(
    (
        "contributors",
        "category_ladders",
        "media",
        "product_attrs",
        "product_desc",
        "product_extended_attrs",
        "rating",
        "series",
    )
)
IMAGE_SIZES: Final[str] = "2400,1215,500"


class AudibleProvider(HttpProvider):
    source: ClassVar[MediaSource] = MediaSource.AUDIBLE
    lots: ClassVar[frozenset[MediaLot]] = frozenset({MediaLot.AUDIO_BOOK})

    def __init__(
        self,
        *,
        config: AudibleConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or get_audible_config()
        super().__init__(resilience=self._config.resilience, client_factory=client_factory)

    async def fetch_raw(self, identifier: str, shape: RequestShape) -> RawPayload:
        require_lot(self.source, self.lots, shape.lot)
        asin = identifier.strip().upper()
        client = self._client()
        response = await client.get(
            f"catalog/products/{asin}",
            params={"response_groups": RESPONSE_GROUPS, "image_sizes": IMAGE_SIZES},
        )
        payload = json_object(response, source=self.source)
        product = payload.get("product")
        # Unknown ASINs come back as a bare stub without a title.
        if not isinstance(product, dict) or not product.get("title"):
            raise FetchError(
                FetchError.Kind.NOT_FOUND,
                f"{self.source} {identifier}: no such product",
                source=self.source.value,
            )
        similar = await self._similar_products(client, asin)
        return {"product": product, "similar_products": similar}

    def normalize(self, raw: RawPayload, lot: MediaLot) -> NormalizedRecord:
        require_lot(self.source, self.lots, lot)
        return translate_audiobook(raw, product_url_base=self._config.product_url_base)

    async def _similar_products(self, client: ResilientClient, asin: str) -> list[object]:
        response = await client.get(
            f"catalog/products/{asin}/sims",
            params={
                "similarity_type": "InTheSameSeries",
                "response_groups": "media,product_attrs",
                "image_sizes": "500",
            },
        )
        payload = json_object(response, source=self.source)
        products = payload.get("similar_products")
        return products if isinstance(products, list) else []
