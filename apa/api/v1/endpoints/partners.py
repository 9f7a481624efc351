"""Partners API."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Response

from apa.api.v1.dependencies import AdminActor, CurrentActor, get_partner_service, require_feature
from apa.application.services.content_service import PartnerService
from apa.domain.enums import FeatureFlag

router = APIRouter()

PartnerServiceDep = Annotated[PartnerService, Depends(get_partner_service)]


@router.get("", dependencies=[Depends(require_feature(FeatureFlag.PARTNERS.value))])
async def list_partners(partners: PartnerServiceDep) -> list[dict[str, Any]]:
    """Active partners by display order."""
    return [r.to_dict() for r in await partners.list_public()]


@router.get("/all")
async def list_all_partners(partners: PartnerServiceDep, actor: AdminActor) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await partners.list_for_admin(actor)]


@router.post("", status_code=201)
async def create_partner(
    partners: PartnerServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await partners.create(body, actor)).to_dict()


@router.patch("/{partner_id}")
async def update_partner(
    partner_id: str,
    partners: PartnerServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await partners.update(partner_id, body, actor)).to_dict()


@router.delete("/{partner_id}", status_code=204)
async def delete_partner(partner_id: str, partners: PartnerServiceDep, actor: CurrentActor) -> Response:
    await partners.delete(partner_id, actor)
    return Response(status_code=204)
