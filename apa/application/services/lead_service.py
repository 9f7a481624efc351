"""Lead services: adoption interest, volunteer and foster-home (LT) applications.

An applicant may hold at most one active lead per scope (userId, plus petId
for adoption). The current lead is the most recent one by createdAt; the
rule is enforced by a check-then-write at creation, not transactionally.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.events import TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.projections import latest_record
from apa.application.services.record_service import (
    RecordKind,
    WorkflowRecordService,
    require_actor,
    require_admin,
)
from apa.domain.enums import LeadStatus, PetStatus
from apa.domain.exceptions import (
    DuplicateActiveLeadException,
    IllegalTransitionException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from apa.domain.workflows import LEAD, PET_LISTING
from apa.infrastructure.firebase.collections import (
    COLLECTION_LEADS_ADOPTION,
    COLLECTION_LEADS_FOSTER,
    COLLECTION_LEADS_VOLUNTEER,
)
from apa.schemas.leads import (
    AdoptionLeadCreate,
    FosterHomeLeadCreate,
    VolunteerLeadCreate,
)

logger = logging.getLogger(__name__)

ADOPTION_LEAD = RecordKind(
    name="adoption_lead",
    collection=COLLECTION_LEADS_ADOPTION,
    create_schema=AdoptionLeadCreate,
    workflows={"status": LEAD},
)
VOLUNTEER_LEAD = RecordKind(
    name="volunteer_lead",
    collection=COLLECTION_LEADS_VOLUNTEER,
    create_schema=VolunteerLeadCreate,
    workflows={"status": LEAD},
)
FOSTER_HOME_LEAD = RecordKind(
    name="foster_home_lead",
    collection=COLLECTION_LEADS_FOSTER,
    create_schema=FosterHomeLeadCreate,
    workflows={"status": LEAD},
)

# Profile fields copied into a submission when the form leaves them out.
_PROFILE_DEFAULTS = (("name", "display_name"), ("email", "email"), ("phone", "phone"))


class LeadService(WorkflowRecordService):
    """Workflow service for one lead collection."""

    scope_fields: tuple[str, ...] = ()

    def current_query(self, user_id: str, **scope: str) -> RecordQuery:
        """Query whose first row is the applicant's current lead in scope."""
        query = RecordQuery().where("userId", "==", user_id)
        for name in self.scope_fields:
            query = query.where(name, "==", scope[name])
        return query.ordered("createdAt", DESCENDING).limited(1)

    async def current_for(self, user_id: str, **scope: str) -> RecordResult | None:
        return latest_record(await self._repo.query(self.current_query(user_id, **scope)))

    def _scope_of(self, data: Mapping[str, Any]) -> dict[str, str]:
        return {name: data[name] for name in self.scope_fields}

    async def _before_create(self, data: dict[str, Any], actor: Actor) -> None:
        existing = await self.current_for(actor.uid, **self._scope_of(data))
        if existing is None:
            return
        status = LEAD.current(existing.data)
        if status in LeadStatus.active():
            raise DuplicateActiveLeadException(existing.id, status)

    async def create(self, payload: Any, actor: Actor | None) -> RecordResult:
        """Submit a lead; name/email/phone default to the applicant's profile."""
        actor = require_actor(actor)
        if isinstance(payload, Mapping):
            payload = dict(payload)
            for key, attr in _PROFILE_DEFAULTS:
                if not payload.get(key) and getattr(actor, attr):
                    payload[key] = getattr(actor, attr)
        return await super().create(payload, actor)

    async def list_for_admin(self, actor: Actor | None, status: str | None = None) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        return self.filter_by_status(await self.list(), status)

    async def reopen(self, record_id: str, actor: Actor | None) -> RecordResult:
        """Bring a rejected lead back to pending.

        Admin: rejected -> pending on the same record. Original applicant: a
        fresh pending lead copied from the rejected one; the rejected record
        stays as history.
        """
        actor = require_actor(actor)
        record = await self.get(record_id)
        status = LEAD.current(record.data)
        if status != LeadStatus.REJECTED.value:
            raise IllegalTransitionException(LEAD.name, status, LeadStatus.PENDING.value)
        if actor.is_admin:
            return await self.transition_record(record, LeadStatus.PENDING.value, actor)
        if record.get("userId") != actor.uid:
            raise UnauthorizedException(action="reopen", resource=self.kind.name)
        fields = self.kind.create_schema.model_fields
        payload = {k: v for k, v in record.data.items() if k in fields}
        resubmitted = await self.create(payload, actor)
        logger.info("%s %s resubmitted as %s", self.kind.name, record.id, resubmitted.id)
        return resubmitted


class AdoptionLeadService(LeadService):
    """Adoption interest in one listing (scope userId + petId)."""

    scope_fields = ("petId",)

    def __init__(
        self,
        repo: IRecordRepository,
        pets_repo: IRecordRepository,
        events: TransitionEventBus | None = None,
    ) -> None:
        super().__init__(ADOPTION_LEAD, repo, events)
        self._pets = pets_repo

    async def _prepare(self, model: BaseModel, actor: Actor) -> dict[str, Any]:
        data = self._dump(model)
        pet = await self._pets.get(data["petId"])
        if pet is None:
            raise ResourceNotFoundException("pet", data["petId"])
        if PET_LISTING.current(pet.data) != PetStatus.DISPONIVEL.value:
            raise ValidationException("Pet is not available for adoption", field="petId")
        data["petName"] = pet.get("name", "")
        return data


class VolunteerLeadService(LeadService):
    def __init__(self, repo: IRecordRepository, events: TransitionEventBus | None = None) -> None:
        super().__init__(VOLUNTEER_LEAD, repo, events)


class FosterHomeLeadService(LeadService):
    def __init__(self, repo: IRecordRepository, events: TransitionEventBus | None = None) -> None:
        super().__init__(FOSTER_HOME_LEAD, repo, events)
