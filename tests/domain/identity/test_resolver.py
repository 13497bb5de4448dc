from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from mediasync.config import SyncConfig
from mediasync.domain.errors import ResolutionError
from mediasync.domain.identity import IdentityResolver, ResolutionStatus
from mediasync.domain.model import IdentityKey, MediaLot, MediaMerge, MediaSource
from tests.helpers.records import make_canonical, make_normalized, seed_canonical

if TYPE_CHECKING:
    from mediasync.domain.ports import MediaUnitOfWorkFactory


def test_unknown_identity_without_record_mints_new_id(
    uow_factory: MediaUnitOfWorkFactory,
) -> None:
    resolver = IdentityResolver(uow_factory)

    resolution = resolver.resolve(MediaSource.TMDB, "603", MediaLot.MOVIE)

    assert resolution.status is ResolutionStatus.NEW
    assert resolver.lookup(MediaSource.TMDB, "603", MediaLot.MOVIE) == resolution.internal_id


def test_resolution_is_idempotent(uow_factory: MediaUnitOfWorkFactory) -> None:
    resolver = IdentityResolver(uow_factory)
    record = make_normalized()

    first = resolver.resolve(MediaSource.TMDB, "603", MediaLot.MOVIE, record)
    again = [resolver.resolve(MediaSource.TMDB, "603", MediaLot.MOVIE, record) for _ in range(3)]

    assert {resolution.internal_id for resolution in again} == {first.internal_id}
    assert all(resolution.status is ResolutionStatus.EXISTING for resolution in again)


def test_same_title_from_another_provider_attaches_to_existing_record(
    uow_factory: MediaUnitOfWorkFactory,
) -> None:
    stored = seed_canonical(uow_factory, make_canonical(identifier="42"))
    resolver = IdentityResolver(uow_factory)
    incoming = make_normalized("Matrix", source=MediaSource.ITUNES, identifier="42")

    resolution = resolver.resolve(MediaSource.ITUNES, "42", MediaLot.MOVIE, incoming)

    assert resolution.status is ResolutionStatus.MATCHED
    assert resolution.internal_id == stored.id
    assert resolution.score == 1.0
    with uow_factory() as uow:
        identities = uow.repositories.media.list_provider_identities(stored.id)
    assert {identity.source for identity in identities} == {MediaSource.TMDB, MediaSource.ITUNES}


def test_same_source_never_matches_itself(uow_factory: MediaUnitOfWorkFactory) -> None:
    stored = seed_canonical(uow_factory, make_canonical())
    resolver = IdentityResolver(uow_factory)

    resolution = resolver.resolve(
        MediaSource.TMDB, "604", MediaLot.MOVIE, make_normalized(identifier="604")
    )

    assert resolution.status is ResolutionStatus.NEW
    assert resolution.internal_id != stored.id


def test_other_lot_is_not_a_candidate(uow_factory: MediaUnitOfWorkFactory) -> None:
    seed_canonical(uow_factory, make_canonical(lot=MediaLot.MANGA))
    resolver = IdentityResolver(uow_factory)

    resolution = resolver.resolve(
        MediaSource.ITUNES, "1", MediaLot.MOVIE, make_normalized(source=MediaSource.ITUNES)
    )

    assert resolution.status is ResolutionStatus.NEW


def test_borderline_match_fails_closed_without_persisting(
    uow_factory: MediaUnitOfWorkFactory,
) -> None:
    seed_canonical(uow_factory, make_canonical(year=None))
    config = SyncConfig(similarity_threshold=0.97, ambiguity_margin=0.04)
    resolver = IdentityResolver(uow_factory, config)
    incoming = make_normalized(source=MediaSource.ITUNES, identifier="42")

    with pytest.raises(ResolutionError) as excinfo:
        resolver.resolve(MediaSource.ITUNES, "42", MediaLot.MOVIE, incoming)

    assert excinfo.value.kind is ResolutionError.Kind.AMBIGUOUS_MATCH
    assert resolver.lookup(MediaSource.ITUNES, "42", MediaLot.MOVIE) is None


def test_two_equally_good_records_are_ambiguous(uow_factory: MediaUnitOfWorkFactory) -> None:
    seed_canonical(uow_factory, make_canonical())
    seed_canonical(uow_factory, make_canonical(source=MediaSource.ITUNES, identifier="9"))
    resolver = IdentityResolver(uow_factory)
    incoming = make_normalized(source=MediaSource.VNDB, identifier="v1")

    with pytest.raises(ResolutionError):
        resolver.resolve(MediaSource.VNDB, "v1", MediaLot.MOVIE, incoming)


def test_identity_of_merged_record_follows_redirect(uow_factory: MediaUnitOfWorkFactory) -> None:
    survivor = seed_canonical(uow_factory, make_canonical(source=MediaSource.ITUNES))
    merged = seed_canonical(uow_factory, make_canonical())
    with uow_factory() as uow:
        uow.repositories.media.record_merge(
            MediaMerge(merged_id=merged.id, survivor_id=survivor.id)
        )
        uow.commit()
    resolver = IdentityResolver(uow_factory)

    resolution = resolver.resolve(MediaSource.TMDB, "603", MediaLot.MOVIE)

    assert resolution.internal_id == survivor.id
    with uow_factory() as uow:
        identity = uow.repositories.media.get_provider_identity(
            IdentityKey(MediaSource.TMDB, "603", MediaLot.MOVIE)
        )
    assert identity is not None
    assert identity.internal_id == survivor.id


def test_find_duplicates_skips_records_sharing_a_source(
    uow_factory: MediaUnitOfWorkFactory,
) -> None:
    record = seed_canonical(uow_factory, make_canonical())
    duplicate = seed_canonical(
        uow_factory, make_canonical("Matrix", source=MediaSource.ITUNES, identifier="42")
    )
    seed_canonical(uow_factory, make_canonical(identifier="999"))
    seed_canonical(
        uow_factory, make_canonical(source=MediaSource.IGDB, identifier="7", year=1970)
    )
    resolver = IdentityResolver(uow_factory)

    assert resolver.find_duplicates(record) == [duplicate.id]


def test_bucket_lock_serializes_similar_titles(uow_factory: MediaUnitOfWorkFactory) -> None:
    resolver = IdentityResolver(uow_factory)
    order: list[str] = []

    async def hold(name: str, title: str) -> None:
        async with resolver.bucket_lock(MediaLot.MOVIE, title):
            order.append(f"{name} in")
            await asyncio.sleep(0.01)
            order.append(f"{name} out")

    async def scenario() -> None:
        await asyncio.gather(hold("first", "The Matrix"), hold("second", "Matrix Reloaded"))

    asyncio.run(scenario())

    assert order == ["first in", "first out", "second in", "second out"]
