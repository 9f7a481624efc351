"""Health check endpoints: liveness and readiness probes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from apa.api.v1.dependencies import get_live_queries, get_store
from apa.application.live_query import LiveQueryService
from apa.infrastructure.store import RecordStore
from apa.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    store: Annotated[RecordStore, Depends(get_store)],
    live_queries: Annotated[LiveQueryService, Depends(get_live_queries)],
) -> ReadinessResponse:
    """Return the configured store backend and the number of running live queries."""
    return ReadinessResponse(
        store_backend=store.backend,
        live_subscriptions=live_queries.subscription_count,
    )
