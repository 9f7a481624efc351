"""Lost/found board: user posts with independent moderation and found/lost axes.

Only approved posts are public, whatever their perdido/encontrado status.
"""

from __future__ import annotations

from typing import Any

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.events import TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.record_service import (
    RecordKind,
    WorkflowRecordService,
    require_actor,
    require_admin,
)
from apa.domain.enums import ModerationStatus
from apa.domain.workflows import LOST_PET_MODERATION, LOST_PET_STATUS
from apa.infrastructure.firebase.collections import COLLECTION_LOST_PETS
from apa.schemas.common import parse_payload
from apa.schemas.lost_pets import LostPetCreate, SuccessStory

LOST_PET = RecordKind(
    name="lost_pet",
    collection=COLLECTION_LOST_PETS,
    create_schema=LostPetCreate,
    workflows={
        LOST_PET_MODERATION.field: LOST_PET_MODERATION,
        LOST_PET_STATUS.field: LOST_PET_STATUS,
    },
)


class LostPetService(WorkflowRecordService):
    def __init__(self, repo: IRecordRepository, events: TransitionEventBus | None = None) -> None:
        super().__init__(LOST_PET, repo, events)

    async def moderate(self, record_id: str, target: str, actor: Actor | None) -> RecordResult:
        return await self.transition(
            record_id, target, actor, status_field=LOST_PET_MODERATION.field
        )

    async def set_found_status(
        self,
        record_id: str,
        target: str,
        actor: Actor | None,
        story: Any = None,
    ) -> RecordResult:
        """Move perdido <-> encontrado; a story rides along in the event context."""
        context: dict[str, Any] = {}
        if story is not None:
            context["story"] = parse_payload(SuccessStory, story).model_dump()
        return await self.transition(
            record_id, target, actor, status_field=LOST_PET_STATUS.field, context=context
        )

    def public_query(self) -> RecordQuery:
        return (
            RecordQuery()
            .where(LOST_PET_MODERATION.field, "==", ModerationStatus.APPROVED.value)
            .ordered("createdAt", DESCENDING)
        )

    async def list_public(self, status: str | None = None) -> list[RecordResult]:
        records = await self._repo.query(self.public_query())
        return self.filter_by_status(records, status, LOST_PET_STATUS.field)

    async def list_for_moderation(
        self, actor: Actor | None, moderation: str | None = None
    ) -> list[RecordResult]:
        """Every post, newest first; posts without moderationStatus count as pending."""
        require_admin(actor, "list", self.kind.name)
        records = await self.list()
        return self.filter_by_status(records, moderation, LOST_PET_MODERATION.field)

    async def list_mine(self, actor: Actor | None) -> list[RecordResult]:
        actor = require_actor(actor)
        records = await self._repo.query(RecordQuery().where("userId", "==", actor.uid))
        return sorted(records, key=lambda r: str(r.get("createdAt", "")), reverse=True)
