"""Medical records API (admin only)."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response

from apa.api.v1.dependencies import AdminActor, CurrentActor, get_medical_record_service
from apa.application.services.medical_record_service import MedicalRecordService
from apa.schemas.workflow import TransitionRequest

router = APIRouter()

MedicalRecordServiceDep = Annotated[MedicalRecordService, Depends(get_medical_record_service)]


@router.get("")
async def list_medical_records(
    records: MedicalRecordServiceDep,
    actor: AdminActor,
    pet_id: Annotated[str | None, Query(alias="petId")] = None,
    status: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """Most recent procedure date first, optionally for one pet."""
    return [r.to_dict() for r in await records.list_for_admin(actor, pet_id, status)]


@router.post("", status_code=201)
async def create_medical_record(
    records: MedicalRecordServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await records.create(body, actor)).to_dict()


@router.get("/{record_id}")
async def get_medical_record(
    record_id: str, records: MedicalRecordServiceDep, actor: AdminActor
) -> dict[str, Any]:
    return (await records.get(record_id)).to_dict()


@router.patch("/{record_id}")
async def update_medical_record(
    record_id: str,
    records: MedicalRecordServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await records.update(record_id, body, actor)).to_dict()


@router.post("/{record_id}/transition")
async def transition_medical_record(
    record_id: str,
    body: TransitionRequest,
    records: MedicalRecordServiceDep,
    actor: CurrentActor,
) -> dict[str, Any]:
    return (await records.transition(record_id, body.status, actor, body.reason)).to_dict()


@router.delete("/{record_id}", status_code=204)
async def delete_medical_record(
    record_id: str, records: MedicalRecordServiceDep, actor: CurrentActor
) -> Response:
    await records.delete(record_id, actor)
    return Response(status_code=204)
