"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the record store and application services.
Services are built here from the infrastructure objects the lifespan puts on
app.state; routes depend only on these dependencies.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from apa.application.dtos.identity import Actor
from apa.application.events import TransitionEventBus
from apa.application.interfaces.services import IAuthProvider, IImageUploader, ITokenVerifier
from apa.application.live_query import LiveQueryService
from apa.application.services.content_service import PartnerService, PostService
from apa.application.services.export_service import ExportService
from apa.application.services.identity_service import IdentityService
from apa.application.services.lead_service import (
    AdoptionLeadService,
    FosterHomeLeadService,
    LeadService,
    VolunteerLeadService,
)
from apa.application.services.lost_pet_service import LostPetService
from apa.application.services.medical_record_service import MedicalRecordService
from apa.application.services.pet_service import PetListingService
from apa.application.services.record_service import require_actor, require_admin
from apa.application.services.rescue_service import RescueService
from apa.application.services.site_settings_service import FeatureFlagService, SettingsService
from apa.core.config import get_settings
from apa.domain.enums import FeatureFlag
from apa.domain.exceptions import ConfigurationException
from apa.infrastructure.firebase.collections import (
    COLLECTION_CONFIG,
    COLLECTION_LEADS_ADOPTION,
    COLLECTION_LEADS_FOSTER,
    COLLECTION_LEADS_VOLUNTEER,
    COLLECTION_LOST_PETS,
    COLLECTION_MEDICAL_RECORDS,
    COLLECTION_PARTNERS,
    COLLECTION_PETS,
    COLLECTION_POSTS,
    COLLECTION_RESCUES,
    COLLECTION_USERS,
)
from apa.infrastructure.store import RecordStore

# ---- Infrastructure (from app.state) ----


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_events(request: Request) -> TransitionEventBus:
    return request.app.state.events


def get_live_queries(request: Request) -> LiveQueryService:
    return request.app.state.live_queries


def get_feature_flags(request: Request) -> FeatureFlagService:
    return request.app.state.feature_flags


def get_token_verifier(request: Request) -> ITokenVerifier:
    return request.app.state.token_verifier


def get_auth_provider(request: Request) -> IAuthProvider:
    """Identity provider for sign-in; 503 when the Firebase web API key is not configured."""
    provider = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        raise ConfigurationException(
            "Sign-in is not configured (set AUTH_BACKEND=firebase and FIREBASE_WEB_API_KEY)",
            {"setting": "firebase_web_api_key"},
        )
    return provider


def get_image_uploader(request: Request) -> IImageUploader:
    uploader = getattr(request.app.state, "image_uploader", None)
    if uploader is None:
        raise ConfigurationException(
            "Image uploads are not configured (set CLOUDINARY_CLOUD_NAME)",
            {"setting": "cloudinary_cloud_name"},
        )
    return uploader


StoreDep = Annotated[RecordStore, Depends(get_store)]
EventsDep = Annotated[TransitionEventBus, Depends(get_events)]


# ---- Services (composition root) ----


def get_identity_service(store: StoreDep) -> IdentityService:
    return IdentityService(store.repo(COLLECTION_USERS))


def get_pet_service(store: StoreDep, events: EventsDep) -> PetListingService:
    return PetListingService(
        store.repo(COLLECTION_PETS), events, max_photos=get_settings().max_pet_photos
    )


def get_adoption_lead_service(store: StoreDep, events: EventsDep) -> AdoptionLeadService:
    return AdoptionLeadService(
        store.repo(COLLECTION_LEADS_ADOPTION), store.repo(COLLECTION_PETS), events
    )


def get_volunteer_lead_service(store: StoreDep, events: EventsDep) -> VolunteerLeadService:
    return VolunteerLeadService(store.repo(COLLECTION_LEADS_VOLUNTEER), events)


def get_foster_lead_service(store: StoreDep, events: EventsDep) -> FosterHomeLeadService:
    return FosterHomeLeadService(store.repo(COLLECTION_LEADS_FOSTER), events)


LEAD_SERVICE_FACTORIES: dict[str, Callable[..., LeadService]] = {
    "adoption": get_adoption_lead_service,
    "volunteer": get_volunteer_lead_service,
    "foster": get_foster_lead_service,
}

# Section flag that switches off applicant submissions of each lead kind.
LEAD_FEATURES: dict[str, str] = {
    "adoption": FeatureFlag.ADOPTION.value,
    "volunteer": FeatureFlag.VOLUNTEERS.value,
    "foster": FeatureFlag.VOLUNTEERS.value,
}


def get_lost_pet_service(store: StoreDep, events: EventsDep) -> LostPetService:
    return LostPetService(store.repo(COLLECTION_LOST_PETS), events)


def get_rescue_service(store: StoreDep, events: EventsDep) -> RescueService:
    return RescueService(store.repo(COLLECTION_RESCUES), events)


def get_medical_record_service(store: StoreDep, events: EventsDep) -> MedicalRecordService:
    return MedicalRecordService(store.repo(COLLECTION_MEDICAL_RECORDS), events)


def get_post_service(store: StoreDep) -> PostService:
    return PostService(store.repo(COLLECTION_POSTS))


def get_partner_service(store: StoreDep) -> PartnerService:
    return PartnerService(store.repo(COLLECTION_PARTNERS))


def get_settings_service(store: StoreDep) -> SettingsService:
    return SettingsService(store.repo(COLLECTION_CONFIG))


def get_export_service(store: StoreDep) -> ExportService:
    return ExportService(store)


# ---- Auth (current actor from bearer token) ----

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_actor_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    verifier: Annotated[ITokenVerifier, Depends(get_token_verifier)],
    identity: Annotated[IdentityService, Depends(get_identity_service)],
) -> Actor | None:
    """Return the caller if a bearer token is present; None for anonymous requests.

    A token that is present but invalid is rejected (401), not downgraded to anonymous.
    """
    if not credentials:
        return None
    auth_identity = await verifier.verify(credentials.credentials)
    return await identity.resolve(auth_identity)


async def get_current_actor(
    actor: Annotated[Actor | None, Depends(get_current_actor_optional)],
) -> Actor:
    """Return the caller; 401 when no token was sent."""
    return require_actor(actor)


async def get_current_admin(
    actor: Annotated[Actor | None, Depends(get_current_actor_optional)],
) -> Actor:
    """Return the caller if admin; 401 without a token, 403 for non-admins."""
    return require_admin(actor, "access", "admin area")


OptionalActor = Annotated[Actor | None, Depends(get_current_actor_optional)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
AdminActor = Annotated[Actor, Depends(get_current_admin)]


def require_feature(feature: str) -> Callable[..., Coroutine[Any, Any, None]]:
    """Dependency factory: 404 (FEATURE_DISABLED) when the section is switched off."""

    async def _require(
        flags: Annotated[FeatureFlagService, Depends(get_feature_flags)],
    ) -> None:
        flags.require(feature)

    return _require
