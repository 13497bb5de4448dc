"""Rate-limited, retrying access to provider documents.

Every provider gets a ``ProviderGate``. ``RateLimitedFetchClient.fetch`` admits
the provider's HTTP traffic through that gate for the duration of
``fetch_raw``; the retries themselves happen in the client transport (see
``mediasync.adapters.http_resilience``), so whatever reaches this module has
already used up its attempts and only needs classifying.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from mediasync.config import get_provider_settings
from mediasync.domain.errors import FetchError

from .http_resilience import ProviderGate, admitted

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from mediasync.config import ProviderSettings
    from mediasync.domain.model import MediaSource
    from mediasync.domain.ports import MediaProvider, RawPayload, RequestShape

log = getLogger(__name__)

_INVALID_IDENTIFIER_STATUSES = frozenset({400, 422})


def _default_settings(source: MediaSource) -> ProviderSettings:
    return get_provider_settings(source.value)


class RateLimitedFetchClient:
    """``fetch(provider, identifier, shape)`` with per-provider limits and retries.

    Gates are created lazily from ``settings_for`` and shared by every caller of
    this client, so one instance must be injected wherever a provider is used.
    """

    def __init__(
        self,
        *,
        settings_for: Callable[[MediaSource], ProviderSettings] = _default_settings,
        gates: Mapping[MediaSource, ProviderGate] | None = None,
    ) -> None:
        self._settings_for = settings_for
        self._gates: dict[MediaSource, ProviderGate] = dict(gates or {})

    def gate(self, source: MediaSource) -> ProviderGate:
        gate = self._gates.get(source)
        if gate is None:
            gate = ProviderGate(source.value, self._settings_for(source))
            self._gates[source] = gate
        return gate

    async def fetch(
        self,
        provider: MediaProvider,
        identifier: str,
        shape: RequestShape,
        *,
        deadline: float | None = None,
    ) -> RawPayload:
        gate = self.gate(provider.source)
        settings = gate.settings
        if deadline is None and settings.queue_timeout_seconds is not None:
            deadline = asyncio.get_running_loop().time() + settings.queue_timeout_seconds

        try:
            with admitted(gate, deadline):
                return await provider.fetch_raw(identifier, shape)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in settings.retry.status_forcelist:
                raise _exhausted(provider.source, identifier, settings, exc) from exc
            raise _status_error(provider.source, identifier, status) from exc
        except settings.retry.retry_on_exceptions as exc:
            raise _exhausted(provider.source, identifier, settings, exc) from exc


def _exhausted(
    source: MediaSource, identifier: str, settings: ProviderSettings, failure: Exception
) -> FetchError:
    attempts = settings.max_retry_attempts
    log.warning(
        "%s %s: giving up after %d attempts (%s)",
        source,
        identifier,
        attempts,
        _describe(failure),
    )
    return FetchError(
        FetchError.Kind.EXHAUSTED,
        f"{source} {identifier}: {attempts} attempts failed, last error: {_describe(failure)}",
        source=source.value,
        status_code=(
            failure.response.status_code if isinstance(failure, httpx.HTTPStatusError) else None
        ),
        attempts=attempts,
    )


def _status_error(source: MediaSource, identifier: str, status: int) -> FetchError:
    if status == httpx.codes.NOT_FOUND:
        kind = FetchError.Kind.NOT_FOUND
    elif status in _INVALID_IDENTIFIER_STATUSES:
        kind = FetchError.Kind.INVALID_IDENTIFIER
    else:
        kind = FetchError.Kind.REJECTED
    return FetchError(
        kind,
        f"{source} {identifier}: HTTP {status}",
        source=source.value,
        status_code=status,
        attempts=1,
    )


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
