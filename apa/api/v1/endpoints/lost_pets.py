"""Lost and found board API.

Users post; admins moderate (pending/approved/rejected) and flip
perdido/encontrado. Only approved posts are public.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from apa.api.v1.dependencies import (
    AdminActor,
    CurrentActor,
    get_lost_pet_service,
    require_feature,
)
from apa.application.services.lost_pet_service import LostPetService
from apa.core.limiter import limit_submissions
from apa.domain.enums import FeatureFlag, ModerationStatus
from apa.schemas.lost_pets import LostPetStatusRequest
from apa.schemas.workflow import TransitionRequest

router = APIRouter()

LostPetServiceDep = Annotated[LostPetService, Depends(get_lost_pet_service)]
_lost_pets_enabled = Depends(require_feature(FeatureFlag.LOST_PETS.value))


@router.get("", dependencies=[_lost_pets_enabled])
async def list_lost_pets(
    lost_pets: LostPetServiceDep,
    status: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """Approved posts, newest first, optionally filtered by perdido/encontrado."""
    return [r.to_dict() for r in await lost_pets.list_public(status)]


@router.get("/me")
async def list_my_lost_pets(lost_pets: LostPetServiceDep, actor: CurrentActor) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await lost_pets.list_mine(actor)]


@router.get("/moderation")
async def list_for_moderation(
    lost_pets: LostPetServiceDep,
    actor: AdminActor,
    moderation: Annotated[str | None, Query(alias="moderationStatus")] = None,
) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await lost_pets.list_for_moderation(actor, moderation)]


@router.post("", status_code=201, dependencies=[_lost_pets_enabled])
@limit_submissions
async def create_lost_pet(
    request: Request,
    lost_pets: LostPetServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Post a lost or found pet; moderation always starts pending."""
    return (await lost_pets.create(body, actor)).to_dict()


@router.post("/{post_id}/moderation")
async def moderate_lost_pet(
    post_id: str,
    body: TransitionRequest,
    lost_pets: LostPetServiceDep,
    actor: CurrentActor,
) -> dict[str, Any]:
    return (await lost_pets.moderate(post_id, body.status, actor)).to_dict()


@router.post("/{post_id}/approve")
async def approve_lost_pet(post_id: str, lost_pets: LostPetServiceDep, actor: CurrentActor) -> dict[str, Any]:
    return (await lost_pets.moderate(post_id, ModerationStatus.APPROVED.value, actor)).to_dict()


@router.post("/{post_id}/status")
async def set_lost_pet_status(
    post_id: str,
    body: LostPetStatusRequest,
    lost_pets: LostPetServiceDep,
    actor: CurrentActor,
) -> dict[str, Any]:
    """Flip perdido/encontrado; a story on encontrado is published as a post."""
    story = body.story.model_dump() if body.story is not None else None
    return (await lost_pets.set_found_status(post_id, body.status.value, actor, story)).to_dict()


@router.delete("/{post_id}", status_code=204)
async def delete_lost_pet(post_id: str, lost_pets: LostPetServiceDep, actor: AdminActor) -> Response:
    await lost_pets.delete(post_id, actor)
    return Response(status_code=204)
