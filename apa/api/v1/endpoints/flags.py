"""Feature flags API: public read, admin replace."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from apa.api.v1.dependencies import CurrentActor, get_feature_flags
from apa.application.services.site_settings_service import FeatureFlagService
from apa.schemas.settings import FeatureFlags

router = APIRouter()

FlagsDep = Annotated[FeatureFlagService, Depends(get_feature_flags)]


@router.get("", response_model=FeatureFlags)
async def get_flags(flags: FlagsDep) -> FeatureFlags:
    """Current section switches (all enabled when flags/global does not exist)."""
    return flags.flags


@router.put("", response_model=FeatureFlags)
async def replace_flags(
    flags: FlagsDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> FeatureFlags:
    return await flags.replace(body, actor)
