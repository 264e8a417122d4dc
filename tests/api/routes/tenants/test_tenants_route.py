"""Testes das rotas de tenants via ASGITransport (sem lifespan)."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from api.routes.tenants import dependencies as tenant_dependencies
from app.app import create_app
from app.bootstrap.dependencies import create_registry
from app.infra.whatsapp import MediaStore
from app.sessions.events import Opened, PairingChallengeIssued
from config.settings import GatewaySettings
from fsm import ConnectionState


@pytest.fixture
async def registry(tmp_path, gateway_settings, address_policy, credential_store, relay, client_factory):
    registry = create_registry(
        relay=relay,
        credential_store=credential_store,
        client_factory=client_factory,
        gateway_settings=gateway_settings,
        address_policy=address_policy,
        media_store=MediaStore(tmp_path / "media"),
    )
    yield registry
    await registry.shutdown()


@pytest.fixture
async def client(registry, credential_store, relay) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app()
    app.state.registry = registry
    app.state.credential_store = credential_store
    app.state.webhook_relay = relay
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


async def _connected(registry, client_factory, tenant_id: str = "acme"):
    client_factory.client_kwargs = {"on_connect": (Opened(account_id="5511999990000"),)}
    session = await registry.get_or_create(tenant_id)
    await session.connect()
    await session.wait_for_events()
    assert session.state == ConnectionState.CONNECTED
    return session


class TestLifecycleRoutes:
    async def test_create_and_duplicate(self, client) -> None:
        created = await client.post("/tenants/acme")
        duplicate = await client.post("/tenants/acme")

        assert created.status_code == 201
        assert created.json()["state"] == "IDLE"
        assert duplicate.status_code == 409
        assert duplicate.json() == {
            "success": False,
            "error": "already_exists",
            "message": duplicate.json()["message"],
        }

    async def test_connect_returns_202_then_200_when_connected(
        self, client, registry, client_factory
    ) -> None:
        client_factory.client_kwargs = {"on_connect": (Opened(),)}

        first = await client.post("/tenants/acme/connect")
        await registry.get("acme").wait_for_events()
        second = await client.post("/tenants/acme/connect")

        assert first.status_code == 202
        assert first.json()["outcome"] == "accepted"
        assert second.status_code == 200
        assert second.json()["outcome"] == "already_connected"

    async def test_connect_failure_maps_to_bad_gateway(self, client, client_factory) -> None:
        client_factory.client_kwargs = {"connect_error": OSError("network down")}

        response = await client.post("/tenants/acme/connect")

        assert response.status_code == 502
        assert response.json()["error"] == "transport_error"

    async def test_status_creates_session_on_demand(self, client, registry) -> None:
        response = await client.get("/tenants/acme/status")

        assert response.status_code == 200
        body = response.json()
        assert body["tenant_id"] == "acme"
        assert body["connected"] is False
        assert "acme" in registry

    async def test_list_delete_and_clear(self, client, registry) -> None:
        await client.post("/tenants/a")
        await client.post("/tenants/b")

        listed = await client.get("/tenants")
        deleted = await client.delete("/tenants/a")
        missing = await client.delete("/tenants/zzz")
        cleared = await client.delete("/tenants")

        assert listed.json()["total"] == 2
        assert deleted.json()["deleted"] is True
        assert missing.json()["deleted"] is False
        assert cleared.json()["cleared"] == 1
        assert len(registry) == 0

    async def test_disconnect_missing_tenant(self, client) -> None:
        response = await client.post("/tenants/ghost/disconnect")

        assert response.status_code == 404
        assert response.json()["error"] == "tenant_not_found"

    async def test_invalid_tenant_id_rejected(self, client) -> None:
        response = await client.get("/tenants/bad id!/status")

        assert response.status_code == 422


class TestPairingRoutes:
    async def test_idle_tenant_is_not_connecting(self, client) -> None:
        response = await client.get("/tenants/acme/pairing-challenge")

        assert response.status_code == 409
        assert response.json()["error"] == "not_connecting"

    async def test_challenge_token_and_png(self, client, registry, client_factory) -> None:
        client_factory.client_kwargs = {"on_connect": (PairingChallengeIssued(token="2@abc"),)}
        await client.post("/tenants/acme/connect")
        await registry.get("acme").wait_for_events()

        challenge = await client.get("/tenants/acme/pairing-challenge")
        png = await client.get("/tenants/acme/pairing-challenge.png")

        assert challenge.json()["status"] == "token"
        assert challenge.json()["pairing_challenge"] == "2@abc"
        assert challenge.json()["expires_at"]
        assert png.status_code == 200
        assert png.headers["content-type"] == "image/png"
        assert png.headers["cache-control"] == "no-store"
        assert png.content.startswith(b"\x89PNG")

    async def test_waiting_while_connecting(self, client, client_factory) -> None:
        await client.post("/tenants/acme/connect")

        response = await client.get("/tenants/acme/pairing-challenge")

        assert response.json()["status"] == "waiting"

    async def test_connected_tenant(self, client, registry, client_factory) -> None:
        await _connected(registry, client_factory)

        response = await client.get("/tenants/acme/pairing-challenge")

        assert response.json()["status"] == "connected"

    async def test_png_without_challenge_is_404(self, client) -> None:
        response = await client.get("/tenants/acme/pairing-challenge.png")

        assert response.status_code == 404
        assert response.json()["error"] == "no_pairing_challenge"


class TestSendRoutes:
    async def test_send_requires_connection(self, client) -> None:
        response = await client.post(
            "/tenants/acme/messages", json={"address": "5511999998888", "text": "oi"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "not_connected"

    async def test_send_text(self, client, registry, client_factory) -> None:
        await _connected(registry, client_factory)

        response = await client.post(
            "/tenants/acme/messages", json={"address": "+55 11 99999-8888", "text": "oi"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message_id": "MSG1"}
        assert client_factory.last.sent == [("5511999998888@s.whatsapp.net", "oi")]

    async def test_invalid_address(self, client, registry, client_factory) -> None:
        await _connected(registry, client_factory)

        response = await client.post(
            "/tenants/acme/messages", json={"address": "123", "text": "oi"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_address"

    async def test_send_media(self, client, registry, client_factory, tmp_path) -> None:
        await _connected(registry, client_factory)
        media = tmp_path / "foto.jpg"
        media.write_bytes(b"\xff\xd8\xff")

        response = await client.post(
            "/tenants/acme/media",
            json={
                "address": "5511999998888",
                "media_kind": "image",
                "file_path": str(media),
                "caption": "legenda",
            },
        )

        assert response.status_code == 200
        assert response.json()["message_id"] == "MEDIA1"

    async def test_send_media_missing_file(self, client, registry, client_factory, tmp_path) -> None:
        await _connected(registry, client_factory)

        response = await client.post(
            "/tenants/acme/media",
            json={
                "address": "5511999998888",
                "media_kind": "image",
                "file_path": str(tmp_path / "missing.jpg"),
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_media"

    async def test_send_media_outside_send_dir(self, client, registry, client_factory) -> None:
        await _connected(registry, client_factory)

        response = await client.post(
            "/tenants/acme/media",
            json={"address": "5511999998888", "media_kind": "document", "file_path": "/etc/passwd"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_media"
        assert client_factory.last.sent_media == []


class TestApiKey:
    @pytest.fixture(autouse=True)
    def _token(self, monkeypatch) -> None:
        monkeypatch.setattr(
            tenant_dependencies,
            "get_gateway_settings",
            lambda: GatewaySettings(api_token="s3cret"),
        )

    async def test_missing_key_rejected(self, client) -> None:
        response = await client.get("/tenants")

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_api_key"

    async def test_wrong_key_rejected(self, client) -> None:
        response = await client.get("/tenants", headers={"X-API-Key": "nope"})

        assert response.status_code == 401

    async def test_valid_key_accepted(self, client) -> None:
        response = await client.get("/tenants", headers={"X-API-Key": "s3cret"})

        assert response.status_code == 200

    async def test_health_is_public(self, client) -> None:
        response = await client.get("/health")

        assert response.status_code == 200


async def test_correlation_id_is_echoed(client) -> None:
    response = await client.get("/health", headers={"X-Correlation-ID": "corr-123"})

    assert response.headers["X-Correlation-ID"] == "corr-123"
