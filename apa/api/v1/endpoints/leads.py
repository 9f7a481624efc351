"""Lead API: adoption interest, volunteer and foster-home applications.

The three lead kinds share one set of routes, built per kind by build_router.
"""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from apa.api.v1.dependencies import (
    LEAD_FEATURES,
    LEAD_SERVICE_FACTORIES,
    AdminActor,
    CurrentActor,
    get_feature_flags,
    require_feature,
)
from apa.application.services.lead_service import LeadService
from apa.application.services.site_settings_service import FeatureFlagService
from apa.core.limiter import limit_submissions, limit_writes
from apa.schemas.workflow import RejectRequest, TransitionRequest


def build_router(kind: str, factory: Callable[..., LeadService]) -> APIRouter:
    """Routes for one lead kind: submit, my current lead, admin queue and transitions."""
    router = APIRouter()
    Service = Annotated[LeadService, Depends(factory)]
    enabled = Depends(require_feature(LEAD_FEATURES[kind]))

    @router.post("", status_code=201, dependencies=[enabled])
    @limit_submissions
    async def submit_lead(
        request: Request,
        leads: Service,
        actor: CurrentActor,
        body: Annotated[dict[str, Any], Body()],
    ) -> dict[str, Any]:
        """Submit a lead; status is always pending. 409 while an active lead exists."""
        return (await leads.create(body, actor)).to_dict()

    @router.get("/me")
    async def my_current_lead(
        leads: Service,
        actor: CurrentActor,
        pet_id: Annotated[str | None, Query(alias="petId")] = None,
    ) -> dict[str, Any] | None:
        """The caller's current lead in scope (most recent), or null."""
        scope = {"petId": pet_id or ""} if "petId" in leads.scope_fields else {}
        record = await leads.current_for(actor.uid, **scope)
        return record.to_dict() if record is not None else None

    @router.get("")
    async def list_leads(
        leads: Service,
        actor: AdminActor,
        status: Annotated[str | None, Query()] = None,
    ) -> list[dict[str, Any]]:
        """Admin queue, newest first; a missing status reads as pending."""
        return [r.to_dict() for r in await leads.list_for_admin(actor, status)]

    @router.get("/{lead_id}")
    async def get_lead(lead_id: str, leads: Service, actor: AdminActor) -> dict[str, Any]:
        return (await leads.get(lead_id)).to_dict()

    @router.post("/{lead_id}/transition")
    @limit_writes
    async def transition_lead(
        request: Request,
        lead_id: str,
        body: TransitionRequest,
        leads: Service,
        actor: CurrentActor,
    ) -> dict[str, Any]:
        """Move a lead to another status (admin); rejected requires a reason."""
        return (await leads.transition(lead_id, body.status, actor, body.reason)).to_dict()

    @router.post("/{lead_id}/reject")
    @limit_writes
    async def reject_lead(
        request: Request,
        lead_id: str,
        body: RejectRequest,
        leads: Service,
        actor: CurrentActor,
    ) -> dict[str, Any]:
        return (await leads.transition(lead_id, "rejected", actor, body.reason)).to_dict()

    @router.post("/{lead_id}/reopen")
    @limit_submissions
    async def reopen_lead(
        request: Request,
        lead_id: str,
        leads: Service,
        actor: CurrentActor,
        flags: Annotated[FeatureFlagService, Depends(get_feature_flags)],
    ) -> dict[str, Any]:
        """Admin: rejected -> pending in place. Applicant: resubmit as a new pending lead.

        The applicant path is a new submission, so it is closed with the section.
        """
        if not actor.is_admin:
            flags.require(LEAD_FEATURES[kind])
        return (await leads.reopen(lead_id, actor)).to_dict()

    @router.delete("/{lead_id}", status_code=204)
    async def delete_lead(lead_id: str, leads: Service, actor: AdminActor) -> Response:
        await leads.delete(lead_id, actor)
        return Response(status_code=204)

    return router


router = APIRouter()
for _kind, _factory in LEAD_SERVICE_FACTORIES.items():
    router.include_router(build_router(_kind, _factory), prefix=f"/{_kind}")
