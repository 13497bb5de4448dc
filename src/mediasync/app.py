"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from mediasync.adapters.anilist import AniListProvider
from mediasync.adapters.audible import AudibleProvider
from mediasync.adapters.fetch_client import RateLimitedFetchClient
from mediasync.adapters.igdb import IgdbProvider
from mediasync.adapters.itunes import ITunesProvider
from mediasync.adapters.openlibrary import OpenLibraryProvider
from mediasync.adapters.response_cache import ResponseCache
from mediasync.adapters.sqlalchemy import SqlAlchemyDatabase
from mediasync.adapters.tmdb import TmdbProvider
from mediasync.adapters.vndb import VndbProvider
from mediasync.config import MissingConfigurationError, get_provider_settings, get_sync_config
from mediasync.domain.identity import IdentityResolver
from mediasync.domain.model import MediaSource, ProviderTarget
from mediasync.domain.query import media_details
from mediasync.domain.sync import (
    CanonicalStoreWriter,
    ProviderRegistry,
    SyncOrchestrator,
    SyncUnitRunner,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType
    from uuid import UUID

    from mediasync.config import ProviderSettings, SyncConfig
    from mediasync.domain.model import MediaLot, SyncFailure
    from mediasync.domain.ports import MediaProvider
    from mediasync.domain.query import MediaDetails

log = getLogger(__name__)

PROVIDER_FACTORIES: dict[MediaSource, Callable[[], MediaProvider]] = {
    MediaSource.TMDB: TmdbProvider,
    MediaSource.OPENLIBRARY: OpenLibraryProvider,
    MediaSource.ANILIST: AniListProvider,
    MediaSource.ITUNES: ITunesProvider,
    MediaSource.IGDB: IgdbProvider,
    MediaSource.VNDB: VndbProvider,
    MediaSource.AUDIBLE: AudibleProvider,
}


def build_providers(sources: Iterable[MediaSource] | None = None) -> list[MediaProvider]:
    """Instantiate providers from the environment.

    With explicit ``sources`` a missing credential is an error; otherwise
    providers lacking credentials are left out.
    """

    if sources is not None:
        return [PROVIDER_FACTORIES[source]() for source in sources]
    providers: list[MediaProvider] = []
    for source, factory in PROVIDER_FACTORIES.items():
        try:
            providers.append(factory())
        except MissingConfigurationError as exc:
            log.warning("Provider %s disabled: missing %s", source, ", ".join(exc.names))
    return providers


@dataclass(slots=True)
class MediaSyncApp:
    """Fully wired engine: persistence, providers, fetch path and orchestrator."""

    database: SqlAlchemyDatabase
    registry: ProviderRegistry
    fetcher: RateLimitedFetchClient
    cache: ResponseCache
    resolver: IdentityResolver
    writer: CanonicalStoreWriter
    runner: SyncUnitRunner
    orchestrator: SyncOrchestrator

    async def __aenter__(self) -> MediaSyncApp:
        await self.orchestrator.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.orchestrator.shutdown()
        await self.registry.aclose()
        self.database.dispose()


def build_app(
    *,
    database: SqlAlchemyDatabase | None = None,
    providers: Iterable[MediaProvider] | None = None,
    config: SyncConfig | None = None,
    settings_for: Callable[[MediaSource], ProviderSettings] | None = None,
) -> MediaSyncApp:
    """Wire the engine; every collaborator shares one fetch client and one cache."""

    sync_config = config or get_sync_config()
    db = database or SqlAlchemyDatabase()
    db.create_all()

    def default_settings(source: MediaSource) -> ProviderSettings:
        return get_provider_settings(source.value)

    effective_settings = settings_for or default_settings
    registry = ProviderRegistry(build_providers() if providers is None else providers)
    fetcher = RateLimitedFetchClient(settings_for=effective_settings)
    cache = ResponseCache(max_entries=sync_config.cache_max_entries)
    resolver = IdentityResolver(db.unit_of_work, sync_config)
    writer = CanonicalStoreWriter(db.unit_of_work)
    runner = SyncUnitRunner(
        registry=registry,
        fetcher=fetcher,
        cache=cache,
        resolver=resolver,
        writer=writer,
        uow_factory=db.unit_of_work,
        settings_for=effective_settings,
    )
    orchestrator = SyncOrchestrator(runner, db.unit_of_work, sync_config)
    log.info("Providers enabled: %s", ", ".join(sorted(p.source for p in registry)) or "none")
    return MediaSyncApp(
        database=db,
        registry=registry,
        fetcher=fetcher,
        cache=cache,
        resolver=resolver,
        writer=writer,
        runner=runner,
        orchestrator=orchestrator,
    )


async def refresh_media(
    app: MediaSyncApp,
    *,
    source: MediaSource,
    lot: MediaLot,
    identifier: str,
    timeout: float | None = None,
) -> MediaDetails:
    """Refresh one provider item and return the canonical view of it."""

    target = ProviderTarget(source=source, identifier=identifier, lot=lot)
    log.info("Refreshing %s", target.key)
    internal_id = await app.orchestrator.refresh_now(target, timeout=timeout)
    return load_details(app, internal_id)


def load_details(app: MediaSyncApp, internal_id: UUID) -> MediaDetails:
    return media_details(app.database.unit_of_work(), internal_id)


async def sweep_sources(
    app: MediaSyncApp,
    sources: Iterable[MediaSource],
    *,
    interval: timedelta = timedelta(hours=24),
    drain_seconds: float | None = None,
) -> int:
    """Run one recurring sweep over ``sources`` and wait for the queued jobs.

    Returns the number of jobs still queued when the drain window closed.
    """

    schedule = app.orchestrator.schedule_recurring(sources, interval)
    log.info(
        "Sweeping %s (stale after %s)", ", ".join(sorted(schedule.sources)), schedule.interval
    )
    try:
        await app.orchestrator.wait_idle(timeout=drain_seconds)
    except TimeoutError:
        log.warning("Sweep drain window of %ss elapsed", drain_seconds)
    finally:
        app.orchestrator.cancel_recurring(schedule.id)
    return len(app.orchestrator.jobs)


def recent_failures(app: MediaSyncApp, *, limit: int = 50) -> list[SyncFailure]:
    with app.database.unit_of_work() as uow:
        return uow.repositories.failures.list_recent(limit=limit)

