"""Tests for the application shell: banner, health, metrics and error envelopes."""
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from soundvault.core.error_handler import register_exception_handlers
from soundvault.core.exceptions import InternalError
from soundvault.models import Role
from soundvault.repositories import AccountRepository
from soundvault.scripts.create_admin import ensure_admin

from .conftest import API, upload_song


async def test_root_banner(client):
    response = await client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["endpoints"]["songs"] == f"{API}/songs"


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["database"] == "ok"


async def test_metrics_exposed(client, user_headers):
    song = (await upload_song(client, user_headers)).json()["song"]
    await client.get(song["audioStreamUrl"], headers=user_headers)

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "soundvault_tracks_ingested_total" in response.text
    assert "soundvault_playback_started_total" in response.text


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get(f"{API}/nothing-here")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": {"message": f"Route {API}/nothing-here not found", "statusCode": 404},
    }


async def test_malformed_json_body_is_bad_request(client):
    response = await client.post(f"{API}/auth/login", json={"email": "a@x.com"})

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_correlation_id_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc123"})
    assert response.headers["x-correlation-id"] == "abc123"

    generated = await client.get("/health")
    assert generated.headers["x-correlation-id"]


async def test_ensure_admin_is_idempotent(db_session):
    account, created = await ensure_admin(db_session, "chief", "Chief@Example.com", "chiefpass")

    assert created is True
    assert account.role == Role.ADMIN
    assert account.email == "chief@example.com"

    again, created = await ensure_admin(db_session, "chief", "chief@example.com", "chiefpass")
    assert created is False
    assert again.id == account.id
    assert await AccountRepository(db_session).count(Role.ADMIN) == 1


async def test_unexpected_errors_become_internal_errors():
    failing = FastAPI()
    register_exception_handlers(failing)

    @failing.get("/boom")
    async def boom():
        raise RuntimeError("connection reset by store")

    @failing.get("/internal")
    async def internal():
        raise InternalError("blob store unreachable")

    transport = ASGITransport(app=failing, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        unexpected = await ac.get("/boom")
        raised = await ac.get("/internal")

    expected = {"success": False, "error": {"message": "Internal server error", "statusCode": 500}}
    assert unexpected.status_code == 500
    assert unexpected.json() == expected
    assert raised.status_code == 500
    assert raised.json() == expected
