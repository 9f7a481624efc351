"""Rescue tracking (admin only)."""

from __future__ import annotations

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import RecordResult
from apa.application.events import TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.record_service import (
    RecordKind,
    WorkflowRecordService,
    require_admin,
)
from apa.domain.workflows import RESCUE as RESCUE_WORKFLOW
from apa.infrastructure.firebase.collections import COLLECTION_RESCUES
from apa.schemas.rescues import RescueCreate, RescueUpdate

RESCUE = RecordKind(
    name="rescue",
    collection=COLLECTION_RESCUES,
    create_schema=RescueCreate,
    update_schema=RescueUpdate,
    workflows={"status": RESCUE_WORKFLOW},
    owner_field="createdBy",
    admin_only_create=True,
)


class RescueService(WorkflowRecordService):
    def __init__(self, repo: IRecordRepository, events: TransitionEventBus | None = None) -> None:
        super().__init__(RESCUE, repo, events)

    async def list_for_admin(
        self,
        actor: Actor | None,
        status: str | None = None,
        urgency: str | None = None,
    ) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        records = self.filter_by_status(await self.list(), status)
        if urgency:
            records = [r for r in records if r.get("urgency") == urgency]
        return records
