"""Adoption listings: registration, approval queue, public catalogue and ordering."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.events import TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.projections import sort_listings
from apa.application.services.record_service import (
    RecordKind,
    WorkflowRecordService,
    require_admin,
)
from apa.domain.enums import AgeUnit, PetStatus
from apa.domain.exceptions import (
    IllegalTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from apa.domain.workflows import PET_LISTING
from apa.infrastructure.firebase.collections import COLLECTION_PETS
from apa.schemas.pets import PetCreate, PetUpdate

logger = logging.getLogger(__name__)

PET = RecordKind(
    name="pet",
    collection=COLLECTION_PETS,
    create_schema=PetCreate,
    update_schema=PetUpdate,
    workflows={"status": PET_LISTING},
)

_PUBLIC_STATUSES = frozenset({PetStatus.DISPONIVEL.value, PetStatus.ADOTADO.value})


class PetListingService(WorkflowRecordService):
    """Listings start pendente for users and disponível for admins."""

    def __init__(
        self,
        repo: IRecordRepository,
        events: TransitionEventBus | None = None,
        *,
        max_photos: int = 3,
    ) -> None:
        super().__init__(PET, repo, events)
        self._max_photos = max_photos

    async def _prepare(self, model: BaseModel, actor: Actor) -> dict[str, Any]:
        if len(model.photos) > self._max_photos:
            raise ValidationException(
                f"At most {self._max_photos} photos per pet", field="photos"
            )
        data = self._dump(model, exclude={"ageValue", "ageUnit"})
        data["age"] = AgeUnit(model.ageUnit).label(model.ageValue)
        data["tags"] = [model.species.value, model.gender.value, model.size.value]
        return data

    def _update_fields(self, model: BaseModel) -> dict[str, Any]:
        fields = super()._update_fields(model)
        value, unit = fields.pop("ageValue", None), fields.pop("ageUnit", None)
        if value is not None and unit is not None:
            fields["age"] = AgeUnit(unit).label(value)
        photos = fields.get("photos")
        if photos is not None and len(photos) > self._max_photos:
            raise ValidationException(
                f"At most {self._max_photos} photos per pet", field="photos"
            )
        return fields

    async def approve(self, record_id: str, actor: Actor | None) -> RecordResult:
        return await self.transition(record_id, PetStatus.DISPONIVEL.value, actor)

    async def reject(self, record_id: str, actor: Actor | None) -> None:
        """Reject a pendente listing by deleting it. Other statuses cannot be rejected."""
        actor = require_admin(actor, "reject", self.kind.name)
        record = await self.get(record_id)
        status = PET_LISTING.current(record.data)
        if status != PetStatus.PENDENTE.value:
            raise IllegalTransitionException(PET_LISTING.name, status, "rejected")
        await self._repo.delete(record_id)
        logger.info("Rejected (deleted) pending pet %s by %s", record_id, actor.uid)

    def public_query(self, species: str | None = None, size: str | None = None) -> RecordQuery:
        """disponível listings, equality filters only (no composite index)."""
        query = RecordQuery().where("status", "==", PetStatus.DISPONIVEL.value)
        if species:
            query = query.where("species", "==", species)
        if size:
            query = query.where("size", "==", size)
        return query

    async def list_public(self, species: str | None = None, size: str | None = None) -> list[RecordResult]:
        return sort_listings(await self._repo.query(self.public_query(species, size)))

    async def get_public(self, record_id: str) -> RecordResult:
        """Listing detail for visitors: only disponível and adotado listings exist publicly."""
        record = await self.get(record_id)
        if PET_LISTING.current(record.data) not in _PUBLIC_STATUSES:
            raise ResourceNotFoundException(self.kind.name, record_id)
        return record

    def pending_query(self) -> RecordQuery:
        return (
            RecordQuery()
            .where("status", "==", PetStatus.PENDENTE.value)
            .ordered("createdAt", DESCENDING)
        )

    async def list_pending(self, actor: Actor | None) -> list[RecordResult]:
        require_admin(actor, "list", "pending pets")
        return await self._repo.query(self.pending_query())

    async def list_all(self, actor: Actor | None, status: str | None = None) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        records = await self._repo.query(RecordQuery())
        return sort_listings(self.filter_by_status(records, status))

    async def reorder(self, ordered_ids: list[str], actor: Actor | None) -> None:
        """Rewrite sortOrder to 0..n-1 in one atomic batch."""
        actor = require_admin(actor, "reorder", self.kind.name)
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationException("Duplicate ids in ordering", field="ids")
        await self._repo.batch_update(
            {record_id: {"sortOrder": index} for index, record_id in enumerate(ordered_ids)}
        )
        logger.info("Reordered %d pets by %s", len(ordered_ids), actor.uid)
