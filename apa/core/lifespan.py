"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (record store, HTTP client, event
bus, live queries, auth and upload adapters).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from apa.core.config import get_settings
from apa.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: record store, shared HTTP client, transition event bus
    (with the success-story hook), live queries and feature flags, WebSocket
    manager, token verifier, auth provider and image uploader. Shutdown runs
    in reverse.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    from apa.infrastructure.store import build_record_store

    store = build_record_store(settings)
    app.state.store = store

    # Shared HTTP client for Identity Toolkit and Cloudinary calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=30.0)

    from apa.application.events import TransitionEventBus
    from apa.application.services.success_stories import register_success_story_hook
    from apa.infrastructure.firebase.collections import COLLECTION_FLAGS, COLLECTION_POSTS

    events = TransitionEventBus()
    register_success_story_hook(events, store.repo(COLLECTION_POSTS))
    app.state.events = events

    from apa.application.live_query import LiveQueryService
    from apa.application.services.site_settings_service import FeatureFlagService

    live_queries = LiveQueryService(poll_interval=settings.live_query_poll_seconds)
    app.state.live_queries = live_queries
    feature_flags = FeatureFlagService(store.repo(COLLECTION_FLAGS), live_queries)
    await feature_flags.start()
    app.state.feature_flags = feature_flags

    from apa.api.websocket import ConnectionManager

    app.state.ws_manager = ConnectionManager()

    if settings.auth_backend == "firebase":
        from apa.infrastructure.firebase.auth import FirebaseTokenVerifier

        app.state.token_verifier = FirebaseTokenVerifier(settings.firebase_project_id)
    else:
        from apa.infrastructure.security.jwt import LocalTokenVerifier

        app.state.token_verifier = LocalTokenVerifier()
    logger.info("Auth backend: %s", settings.auth_backend)

    api_key = settings.firebase_web_api_key.get_secret_value() if settings.firebase_web_api_key else ""
    if settings.auth_backend == "firebase" and api_key:
        from apa.infrastructure.firebase.auth import FirebaseAuthClient

        app.state.auth_provider = FirebaseAuthClient(app.state.http_client, api_key)
    else:
        app.state.auth_provider = None

    if settings.cloudinary_cloud_name:
        from apa.infrastructure.external.images.cloudinary import CloudinaryImageUploader

        app.state.image_uploader = CloudinaryImageUploader(
            app.state.http_client,
            settings.cloudinary_cloud_name,
            settings.cloudinary_upload_preset,
        )
    else:
        app.state.image_uploader = None
        logger.info("Cloudinary not configured; image uploads disabled")

    yield

    # ---- Shutdown ----
    await app.state.ws_manager.close_all()
    await feature_flags.stop()
    await live_queries.close()
    logger.info("Live queries closed")

    await events.drain()

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    await store.aclose()
    logger.info("Record store closed")
