try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import logging

import httpx
import pytest

from app import dependencies
from app.main import app
from app.services import PasswordAuthenticator

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture()
def overrides(stack):
    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_tv_pairing_service: lambda: stack.pairing,
            dependencies.get_token_validator: lambda: stack.validator,
            dependencies.get_token_issuer: lambda: stack.issuer,
            dependencies.get_token_refresher: lambda: stack.refresher,
            dependencies.get_password_authenticator: lambda: PasswordAuthenticator(stack.users),
        }
    )
    try:
        yield stack
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
async def client(overrides):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def _login(client: httpx.AsyncClient, email: str, password: str = "password") -> dict:
    response = await client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["data"]["token"]


async def test_healthcheck(client) -> None:
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_pairing_round_trip(client, overrides) -> None:
    overrides.add_user("viewer@example.com")
    mobile_token = await _login(client, "viewer@example.com")

    generated = await client.post("/api/generate-tv-code", json={"email": "viewer@example.com"})
    assert generated.status_code == 201
    code = generated.json()["data"]["code"]

    pending = await client.post("/api/poll-tv-code", json={"code": code})
    assert pending.status_code == 200
    assert pending.json()["data"]["activated"] is False
    assert "token" not in pending.json()["data"]

    activated = await client.post(
        "/api/active-tv-code",
        json={"code": code},
        headers={"Authorization": f"Bearer {mobile_token['access_token']}"},
    )
    assert activated.status_code == 200
    assert activated.json()["message"] == "TV code activated successfully"
    assert activated.json()["data"]["activated"] is True

    paired = await client.post("/api/poll-tv-code", json={"code": code})
    assert paired.status_code == 200
    token = paired.json()["data"]["token"]
    assert token["token_type"] == "Bearer"
    assert token["access_token"] and token["refresh_token"]

    consumed = await client.post("/api/poll-tv-code", json={"code": code})
    assert consumed.status_code == 404
    assert set(consumed.json()) == {"message", "error"}


async def test_activation_requires_a_mobile_token(client, overrides) -> None:
    overrides.add_user("viewer@example.com")
    generated = await client.post("/api/generate-tv-code", json={"email": "viewer@example.com"})
    code = generated.json()["data"]["code"]

    missing = await client.post("/api/active-tv-code", json={"code": code})
    assert missing.status_code == 401

    tv_token = overrides.issuer.issue(overrides.users.find_by_email("viewer@example.com").id, ["tv"])
    wrong_scope = await client.post(
        "/api/active-tv-code",
        json={"code": code},
        headers={"Authorization": f"Bearer {tv_token.access_token}"},
    )
    assert wrong_scope.status_code == 401


async def test_activation_by_another_user_is_forbidden(client, overrides) -> None:
    overrides.add_user("viewer@example.com")
    overrides.add_user("intruder@example.com")
    intruder_token = await _login(client, "intruder@example.com")
    generated = await client.post("/api/generate-tv-code", json={"email": "viewer@example.com"})

    response = await client.post(
        "/api/active-tv-code",
        json={"code": generated.json()["data"]["code"]},
        headers={"Authorization": f"Bearer {intruder_token['access_token']}"},
    )

    assert response.status_code == 403


async def test_unknown_email_and_malformed_code(client) -> None:
    unknown = await client.post("/api/generate-tv-code", json={"email": "nobody@example.com"})
    assert unknown.status_code == 404

    malformed = await client.post("/api/poll-tv-code", json={"code": "12ab"})
    assert malformed.status_code == 422


async def test_login_rejects_bad_password(client, overrides, caplog) -> None:
    overrides.add_user("viewer@example.com", password="correct")

    with caplog.at_level(logging.WARNING, logger="app.auth"):
        response = await client.post(
            "/api/login", json={"email": "viewer@example.com", "password": "wrong"}
        )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"
    assert any("/api/login" in record.getMessage() for record in caplog.records)


async def test_refresh_rotates_once(client, overrides) -> None:
    overrides.add_user("viewer@example.com")
    token = await _login(client, "viewer@example.com")

    rotated = await client.post("/api/refresh", json={"refresh_token": token["refresh_token"]})
    assert rotated.status_code == 200
    assert rotated.json()["data"]["token"]["refresh_token"] != token["refresh_token"]

    replayed = await client.post("/api/refresh", json={"refresh_token": token["refresh_token"]})
    assert replayed.status_code == 401
