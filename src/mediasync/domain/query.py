"""Read side: the ``media_details`` view over the canonical store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from mediasync.domain.errors import MediaNotFoundError

if TYPE_CHECKING:
    from mediasync.domain.model import CanonicalMediaRecord, ProviderIdentity, Suggestion
    from mediasync.domain.ports import MediaUnitOfWork


@dataclass(slots=True)
class MediaDetails:
    record: CanonicalMediaRecord
    suggestions: list[Suggestion] = field(default_factory=list["Suggestion"])
    identities: list[ProviderIdentity] = field(default_factory=list["ProviderIdentity"])

    @property
    def internal_id(self) -> UUID:
        return self.record.id

    def as_dict(self) -> dict[str, Any]:
        """JSON-ready document with camelCase keys."""

        record = self.record
        specifics = record.type_specifics
        group = record.group
        return {
            "id": str(record.id),
            "identifier": record.identifier,
            "lot": record.lot.value,
            "source": record.source.value,
            "title": record.title,
            "description": record.description,
            "isNsfw": record.is_nsfw,
            "sourceUrl": record.source_url,
            "providerRating": record.provider_rating,
            "publishYear": record.publish_year,
            "publishDate": record.publish_date.isoformat() if record.publish_date else None,
            "genres": sorted(record.genres),
            "creators": [
                {
                    "name": creator_group.name,
                    "items": [_camel(asdict(credit)) for credit in creator_group.items],
                }
                for creator_group in record.creators
            ],
            "assets": _camel(asdict(record.assets)),
            "group": (
                {"id": group.identifier, "name": group.name, "part": group.part}
                if group is not None
                else None
            ),
            "suggestions": [_camel(asdict(suggestion)) for suggestion in self.suggestions],
            _specifics_key(specifics.LOT.value): _camel(asdict(specifics)),
            "identities": [
                {
                    "source": identity.source.value,
                    "identifier": identity.external_identifier,
                    "lastSyncedAt": _camel(identity.last_synced_at),
                }
                for identity in self.identities
            ],
        }


def media_details(uow: MediaUnitOfWork, internal_id: UUID) -> MediaDetails:
    """Load a record, its suggestions and identities, following merge redirects."""

    with uow:
        media = uow.repositories.media
        resolved_id = media.resolve_merged_id(internal_id)
        record = media.get_canonical(resolved_id)
        if record is None:
            raise MediaNotFoundError(internal_id)
        return MediaDetails(
            record=record,
            suggestions=media.list_suggestions(resolved_id),
            identities=media.list_provider_identities(resolved_id),
        )


def _specifics_key(lot: str) -> str:
    return f"{lot}Specifics"


def _camel(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel_key(key): _camel(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_camel(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def _camel_key(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)
