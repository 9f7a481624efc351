"""Rescue tracking API (admin only)."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response

from apa.api.v1.dependencies import AdminActor, CurrentActor, get_rescue_service
from apa.application.services.rescue_service import RescueService
from apa.schemas.workflow import TransitionRequest

router = APIRouter()

RescueServiceDep = Annotated[RescueService, Depends(get_rescue_service)]


@router.get("")
async def list_rescues(
    rescues: RescueServiceDep,
    actor: AdminActor,
    status: Annotated[str | None, Query()] = None,
    urgency: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await rescues.list_for_admin(actor, status, urgency)]


@router.post("", status_code=201)
async def create_rescue(
    rescues: RescueServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await rescues.create(body, actor)).to_dict()


@router.get("/{rescue_id}")
async def get_rescue(rescue_id: str, rescues: RescueServiceDep, actor: AdminActor) -> dict[str, Any]:
    return (await rescues.get(rescue_id)).to_dict()


@router.patch("/{rescue_id}")
async def update_rescue(
    rescue_id: str,
    rescues: RescueServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await rescues.update(rescue_id, body, actor)).to_dict()


@router.post("/{rescue_id}/transition")
async def transition_rescue(
    rescue_id: str,
    body: TransitionRequest,
    rescues: RescueServiceDep,
    actor: CurrentActor,
) -> dict[str, Any]:
    return (await rescues.transition(rescue_id, body.status, actor, body.reason)).to_dict()


@router.delete("/{rescue_id}", status_code=204)
async def delete_rescue(rescue_id: str, rescues: RescueServiceDep, actor: CurrentActor) -> Response:
    await rescues.delete(rescue_id, actor)
    return Response(status_code=204)
