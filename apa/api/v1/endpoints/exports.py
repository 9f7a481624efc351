"""Admin CSV exports."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from apa.api.v1.dependencies import CurrentActor, get_export_service
from apa.application.services.export_service import ExportService

router = APIRouter()


@router.get("/{name}.csv")
async def export_csv(
    name: str,
    actor: CurrentActor,
    exports: Annotated[ExportService, Depends(get_export_service)],
) -> Response:
    """Download adoption-leads, volunteer-leads, foster-leads, rescues or medical-records as CSV."""
    filename, content = await exports.export(name, actor)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
