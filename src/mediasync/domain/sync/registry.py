"""Dispatch from provider tag to provider implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mediasync.domain.errors import AdapterError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from mediasync.domain.model import MediaLot, MediaSource
    from mediasync.domain.ports import MediaProvider


class ProviderRegistry:
    def __init__(self, providers: Iterable[MediaProvider] = ()) -> None:
        self._providers: dict[MediaSource, MediaProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: MediaProvider) -> None:
        if provider.source in self._providers:
            raise ValueError(f"Provider for {provider.source} already registered")
        self._providers[provider.source] = provider

    def get(self, source: MediaSource, lot: MediaLot) -> MediaProvider:
        """Return the provider serving ``lot`` for ``source``."""

        provider = self._providers.get(source)
        if provider is None:
            raise AdapterError(
                AdapterError.Kind.UNSUPPORTED_LOT, f"No provider registered for {source}"
            )
        if lot not in provider.lots:
            raise AdapterError(
                AdapterError.Kind.UNSUPPORTED_LOT, f"{source} does not serve {lot} media"
            )
        return provider

    def __contains__(self, source: object) -> bool:
        return source in self._providers

    def __iter__(self) -> Iterator[MediaProvider]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()
