"""Profile API: the caller's own users/{uid} document, and admin role changes."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from apa.api.v1.dependencies import AdminActor, CurrentActor, get_identity_service
from apa.application.services.identity_service import IdentityService
from apa.core.limiter import limit_writes
from apa.domain.enums import UserRole
from apa.schemas.users import ProfileUpdate, RoleUpdate

router = APIRouter()

IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]


@router.get("/me")
async def get_me(actor: CurrentActor, identity: IdentityDep) -> dict[str, Any]:
    """Return the caller's profile (created on first sign-in)."""
    return (await identity.get_profile(actor)).to_dict()


@router.patch("/me")
@limit_writes
async def update_me(
    request: Request,
    body: ProfileUpdate,
    actor: CurrentActor,
    identity: IdentityDep,
) -> dict[str, Any]:
    """Update displayName, phone and foster-home fields. role is not accepted here."""
    return (await identity.update_profile(actor, body)).to_dict()


@router.put("/{uid}/role")
async def set_user_role(
    uid: str,
    actor: AdminActor,
    identity: IdentityDep,
    body: Annotated[RoleUpdate, Body()],
) -> dict[str, Any]:
    """Admin: change a user's role."""
    return (await identity.set_role(uid, UserRole(body.role), actor)).to_dict()
