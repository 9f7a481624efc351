"""Pytest configuration and fixtures for apa.

The app runs with the in-memory store and local HS256 tokens; env is set
before apa.main is imported. Each test gets a fresh app (and store) through
the app fixture, with the lifespan running.
"""

import os

os.environ["STORE_BACKEND"] = "memory"
os.environ["AUTH_BACKEND"] = "local"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LIVE_QUERY_POLL_SECONDS"] = "0.05"
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["FIREBASE_WEB_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from apa.application.dtos.identity import Actor  # noqa: E402
from apa.core.config import get_settings  # noqa: E402
from apa.core.lifespan import create_lifespan  # noqa: E402
from apa.domain.enums import UserRole  # noqa: E402
from apa.infrastructure.firebase.collections import COLLECTION_USERS  # noqa: E402
from apa.infrastructure.security.jwt import issue_local_token  # noqa: E402

ADMIN_UID = "admin-1"
USER_UID = "user-1"
OTHER_UID = "user-2"


@pytest.fixture
async def app() -> FastAPI:
    """Fresh application with its lifespan running (new in-memory store per test)."""
    get_settings.cache_clear()
    from apa.main import create_app

    application = create_app()
    async with create_lifespan(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def bearer(uid: str, email: str = "", name: str = "") -> dict[str, str]:
    """Authorization header with a local token for uid."""
    token = issue_local_token(uid, email=email, name=name)
    return {"Authorization": f"Bearer {token}"}


async def seed_profile(app: FastAPI, uid: str, role: UserRole, **fields) -> None:
    await app.state.store.repo(COLLECTION_USERS).set(
        uid,
        {"uid": uid, "role": role.value, "email": f"{uid}@example.org", "displayName": uid, **fields},
    )


@pytest.fixture
async def admin_headers(app: FastAPI) -> dict[str, str]:
    await seed_profile(app, ADMIN_UID, UserRole.ADMIN)
    return bearer(ADMIN_UID)


@pytest.fixture
async def user_headers(app: FastAPI) -> dict[str, str]:
    await seed_profile(app, USER_UID, UserRole.USER, phone="11987654321")
    return bearer(USER_UID)


@pytest.fixture
async def other_user_headers(app: FastAPI) -> dict[str, str]:
    await seed_profile(app, OTHER_UID, UserRole.USER)
    return bearer(OTHER_UID)


@pytest.fixture
def admin() -> Actor:
    return Actor(uid=ADMIN_UID, role=UserRole.ADMIN, email="admin@example.org")


@pytest.fixture
def user() -> Actor:
    return Actor(
        uid=USER_UID,
        role=UserRole.USER,
        email="ana@example.org",
        display_name="Ana Souza",
        phone="11987654321",
    )


@pytest.fixture
def other_user() -> Actor:
    return Actor(uid=OTHER_UID, role=UserRole.USER, email="bia@example.org", display_name="Bia")
