"""HTTP tests for /register, /device-status and the service endpoints."""
import re

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import create_app


@pytest.fixture
async def secret_client(settings, engine, clock):
    """Client for an app whose registration gate uses a shared secret."""
    gated = settings.model_copy(update={"registration_secret": "s3cret"})
    app = create_app(gated, engine=engine, clock=clock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestRegister:
    """Device registration."""

    async def test_register_returns_token(self, client):
        response = await client.post(
            "/register",
            json={"device_id": "d1", "device_name": "Pixel 8"},
            headers={"X-Device-Fingerprint": "abc"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["device_id"] == "d1"
        assert re.fullmatch(r"[0-9a-f]{64}", data["device_token"])

    async def test_register_without_fingerprint_forbidden(self, client):
        response = await client.post("/register", json={"device_id": "d1", "device_name": "n1"})
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.parametrize(
        "body",
        [{"device_name": "n1"}, {"device_id": "d1"}, {"device_id": "", "device_name": "n1"}, {}],
    )
    async def test_register_missing_fields(self, client, body):
        response = await client.post("/register", json=body, headers={"X-Device-Fingerprint": "abc"})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    @pytest.mark.parametrize(
        "body",
        [{"device_id": "d" * 129, "device_name": "n1"}, {"device_id": "d1", "device_name": "n" * 256}],
    )
    async def test_register_oversized_fields(self, client, body):
        response = await client.post("/register", json=body, headers={"X-Device-Fingerprint": "abc"})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    async def test_register_malformed_json(self, client):
        response = await client.post(
            "/register",
            content=b"{not json",
            headers={"X-Device-Fingerprint": "abc", "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    async def test_shared_secret_gate(self, secret_client):
        body = {"device_id": "d1", "device_name": "n1"}
        denied = await secret_client.post("/register", json=body, headers={"X-Device-Fingerprint": "abc"})
        assert denied.status_code == 403

        wrong = await secret_client.post("/register", json=body, headers={"X-Secret-Key": "nope"})
        assert wrong.status_code == 403

        allowed = await secret_client.post("/register", json=body, headers={"X-Secret-Key": "s3cret"})
        assert allowed.status_code == 200


class TestDeviceStatus:
    """Device status lookup."""

    async def test_status_of_registered_device(self, client, registered_device):
        _, token = registered_device
        response = await client.get("/device-status", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json() == {"device_id": "d1", "device_name": "n1", "status": "active"}

    async def test_status_without_token(self, client):
        response = await client.get("/device-status")
        assert response.status_code == 401

    async def test_status_with_non_bearer_authorization(self, client, registered_device):
        _, token = registered_device
        response = await client.get("/device-status", headers={"Authorization": f"Basic {token}"})
        assert response.status_code == 401

    async def test_status_unknown_token(self, client):
        response = await client.get("/device-status", headers={"X-Device-Token": "f" * 64})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestServiceEndpoints:
    """Root, health and readiness."""

    async def test_root_banner(self, client, settings):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.text == f"{settings.app_name} is running"

    async def test_health(self, client, clock):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["time"] == clock.utcnow().isoformat() + "Z"

    async def test_ready_with_database(self, client):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "ok"
