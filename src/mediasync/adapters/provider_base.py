"""Pieces shared by the provider adapter packages."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from mediasync.adapters.http_resilience import ResilientClient
from mediasync.domain.errors import AdapterError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    import httpx

    from mediasync.config import ResilienceConfig
    from mediasync.domain.model import MediaLot, MediaSource

log = logging.getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class ProviderBaseModel(BaseModel):
    """Lenient upstream schema: unknown keys are kept and logged once per model."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    provider_name: ClassVar[str] = "provider"
    _logged_extra_keys: ClassVar[set[tuple[str, str]]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        model_name = type(self).__name__
        new_keys = {key for key in extras if (model_name, key) not in self._logged_extra_keys}
        if not new_keys:
            return
        self._logged_extra_keys.update((model_name, key) for key in new_keys)
        log.warning(
            "%s %s: unmodeled keys: %s",
            self.provider_name,
            model_name,
            ", ".join(sorted(new_keys)),
        )


def validate_payload[TModel: BaseModel](
    model: type[TModel], payload: object, *, source: MediaSource
) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise AdapterError(
            AdapterError.Kind.MALFORMED_PAYLOAD,
            f"{source}: payload does not match {model.__name__}: {exc.error_count()} errors",
        ) from exc


def json_object(response: httpx.Response, *, source: MediaSource) -> dict[str, Any]:
    """Decode a JSON object body, raising for error statuses first."""

    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as exc:
        raise AdapterError(
            AdapterError.Kind.MALFORMED_PAYLOAD, f"{source}: response is not JSON"
        ) from exc
    if not isinstance(payload, dict):
        raise AdapterError(
            AdapterError.Kind.MALFORMED_PAYLOAD, f"{source}: expected a JSON object"
        )
    return payload


def require_lot(source: MediaSource, lots: frozenset[MediaLot], lot: MediaLot) -> None:
    if lot not in lots:
        raise AdapterError(AdapterError.Kind.UNSUPPORTED_LOT, f"{source} does not serve {lot}")


def malformed(source: MediaSource, message: str) -> AdapterError:
    return AdapterError(AdapterError.Kind.MALFORMED_PAYLOAD, f"{source}: {message}")


class HttpProvider:
    """Base for providers that talk to one HTTP API through ``ResilientClient``."""

    source: ClassVar[MediaSource]
    lots: ClassVar[frozenset[MediaLot]]

    def __init__(
        self,
        *,
        resilience: ResilienceConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._resilience = resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None

    def _client(self) -> ResilientClient:
        """The provider's HTTP client, created on first use and kept until ``aclose``."""

        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    async def aclose(self) -> None:
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()


def text_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def parse_iso_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (or a longer ISO timestamp); ``None`` when unparseable."""

    text = text_or_none(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def unique[T](items: Iterable[T]) -> list[T]:
    """Drop repeats, keeping first-seen order."""

    return list(dict.fromkeys(items))
