"""Adoption listings API: public catalogue, registration and admin management."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from apa.api.v1.dependencies import (
    AdminActor,
    CurrentActor,
    get_pet_service,
    require_feature,
)
from apa.application.services.pet_service import PetListingService
from apa.core.limiter import limit_submissions, limit_writes
from apa.domain.enums import FeatureFlag
from apa.schemas.pets import ReorderRequest
from apa.schemas.workflow import TransitionRequest

router = APIRouter()

PetServiceDep = Annotated[PetListingService, Depends(get_pet_service)]
_adoption_enabled = Depends(require_feature(FeatureFlag.ADOPTION.value))


@router.get("", dependencies=[_adoption_enabled])
async def list_pets(
    pets: PetServiceDep,
    species: Annotated[str | None, Query()] = None,
    size: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """Public catalogue: disponível listings by sortOrder, then newest first."""
    return [r.to_dict() for r in await pets.list_public(species=species, size=size)]


@router.get("/pending")
async def list_pending_pets(pets: PetServiceDep, actor: AdminActor) -> list[dict[str, Any]]:
    """Admin approval queue (pendente), newest first."""
    return [r.to_dict() for r in await pets.list_pending(actor)]


@router.get("/all")
async def list_all_pets(
    pets: PetServiceDep,
    actor: AdminActor,
    status: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """Admin: every listing in catalogue order, optionally filtered by status."""
    return [r.to_dict() for r in await pets.list_all(actor, status)]


@router.put("/order", status_code=204)
@limit_writes
async def reorder_pets(
    request: Request,
    body: ReorderRequest,
    pets: PetServiceDep,
    actor: AdminActor,
) -> Response:
    """Admin: persist a drag-and-drop order as sortOrder 0..n-1 in one batch."""
    await pets.reorder(body.ids, actor)
    return Response(status_code=204)


@router.get("/{pet_id}", dependencies=[_adoption_enabled])
async def get_pet(pet_id: str, pets: PetServiceDep) -> dict[str, Any]:
    return (await pets.get_public(pet_id)).to_dict()


@router.post("", status_code=201)
@limit_submissions
async def register_pet(
    request: Request,
    pets: PetServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Register a listing; pendente for users, disponível for admins."""
    return (await pets.create(body, actor)).to_dict()


@router.patch("/{pet_id}")
@limit_writes
async def update_pet(
    request: Request,
    pet_id: str,
    pets: PetServiceDep,
    actor: AdminActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await pets.update(pet_id, body, actor)).to_dict()


@router.post("/{pet_id}/approve")
async def approve_pet(pet_id: str, pets: PetServiceDep, actor: AdminActor) -> dict[str, Any]:
    return (await pets.approve(pet_id, actor)).to_dict()


@router.post("/{pet_id}/reject", status_code=204)
async def reject_pet(pet_id: str, pets: PetServiceDep, actor: AdminActor) -> Response:
    """Reject a pendente listing (deletes it)."""
    await pets.reject(pet_id, actor)
    return Response(status_code=204)


@router.post("/{pet_id}/transition")
async def transition_pet(
    pet_id: str,
    body: TransitionRequest,
    pets: PetServiceDep,
    actor: AdminActor,
) -> dict[str, Any]:
    return (await pets.transition(pet_id, body.status, actor, body.reason)).to_dict()


@router.delete("/{pet_id}", status_code=204)
async def delete_pet(pet_id: str, pets: PetServiceDep, actor: AdminActor) -> Response:
    await pets.delete(pet_id, actor)
    return Response(status_code=204)
