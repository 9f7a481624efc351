"""General settings API (config/general): donation and contact info."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from apa.api.v1.dependencies import CurrentActor, get_settings_service, require_feature
from apa.application.services.site_settings_service import SettingsService
from apa.domain.enums import FeatureFlag
from apa.domain.exceptions import ResourceNotFoundException
from apa.infrastructure.firebase.collections import DOC_CONFIG_GENERAL

router = APIRouter()

SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]


@router.get("", dependencies=[Depends(require_feature(FeatureFlag.DONATIONS.value))])
async def get_general_settings(settings: SettingsServiceDep) -> dict[str, Any]:
    data = await settings.get()
    if data is None:
        raise ResourceNotFoundException("settings", DOC_CONFIG_GENERAL)
    return data


@router.put("")
async def replace_general_settings(
    settings: SettingsServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return await settings.replace(body, actor)
