"""Medical records of sheltered pets (admin only)."""

from __future__ import annotations

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.events import TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.record_service import (
    RecordKind,
    WorkflowRecordService,
    require_admin,
)
from apa.domain.workflows import MEDICAL_RECORD as MEDICAL_RECORD_WORKFLOW
from apa.infrastructure.firebase.collections import COLLECTION_MEDICAL_RECORDS
from apa.schemas.medical_records import MedicalRecordCreate, MedicalRecordUpdate

MEDICAL_RECORD = RecordKind(
    name="medical_record",
    collection=COLLECTION_MEDICAL_RECORDS,
    create_schema=MedicalRecordCreate,
    update_schema=MedicalRecordUpdate,
    workflows={"status": MEDICAL_RECORD_WORKFLOW},
    owner_field="createdBy",
    admin_only_create=True,
    default_order=(("date", DESCENDING),),
)


class MedicalRecordService(WorkflowRecordService):
    def __init__(self, repo: IRecordRepository, events: TransitionEventBus | None = None) -> None:
        super().__init__(MEDICAL_RECORD, repo, events)

    def query_for(self, pet_id: str | None = None) -> RecordQuery:
        query = RecordQuery()
        if pet_id:
            query = query.where("petId", "==", pet_id)
        return query.ordered("date", DESCENDING)

    async def list_for_admin(
        self,
        actor: Actor | None,
        pet_id: str | None = None,
        status: str | None = None,
    ) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        records = await self._repo.query(self.query_for(pet_id))
        return self.filter_by_status(records, status)
