"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from apa.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from apa.api.v1.endpoints import (
    auth,
    exports,
    flags,
    health,
    leads,
    live,
    lost_pets,
    medical_records,
    partners,
    pets,
    posts,
    rescues,
    site_settings,
    uploads,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(pets.router, prefix="/pets", tags=["pets"])
api_router.include_router(leads.router, prefix="/leads", tags=["leads"])
api_router.include_router(lost_pets.router, prefix="/lost-pets", tags=["lost-pets"])
api_router.include_router(rescues.router, prefix="/rescues", tags=["rescues"])
api_router.include_router(
    medical_records.router, prefix="/medical-records", tags=["medical-records"]
)
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(partners.router, prefix="/partners", tags=["partners"])
api_router.include_router(flags.router, prefix="/flags", tags=["flags"])
api_router.include_router(site_settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
api_router.include_router(live.router, tags=["live"])
