"""Health probes, bearer-token guard and sign-in configuration."""

from httpx import AsyncClient

from tests.conftest import bearer


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


async def test_readiness_reports_store_and_flag_subscription(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["store_backend"] == "memory"
    assert body["live_subscriptions"] >= 1


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


async def test_admin_route_without_token_is_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/pets/pending")
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_admin_route_as_user_is_403(client: AsyncClient, user_headers: dict) -> None:
    response = await client.get("/api/v1/pets/pending", headers=user_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"


async def test_invalid_token_is_401_even_on_public_routes(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_first_request_provisions_profile(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/me", headers=bearer("new-user", email="novo@example.org"))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "new-user"
    assert body["role"] == "user"
    assert body["email"] == "novo@example.org"


async def test_login_without_identity_provider_is_configuration_pending(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": "ana@example.org", "password": "segredo123"})
    assert response.status_code == 503
    assert response.json()["error"] == "CONFIGURATION_PENDING"


async def test_upload_without_cloudinary_is_configuration_pending(client: AsyncClient, user_headers: dict) -> None:
    response = await client.post(
        "/api/v1/uploads/images",
        headers=user_headers,
        files={"file": ("mia.jpg", b"\xff\xd8\xff", "image/jpeg")},
    )
    assert response.status_code == 503


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id\r\nx"})
    assert response.headers["X-Request-ID"] != "bad id\r\nx"
    assert len(response.headers["X-Request-ID"]) == 32
