"""Testes das factories de dependências."""

from __future__ import annotations

import pytest

from app.bootstrap import dependencies
from app.bootstrap.dependencies import (
    create_credential_store,
    create_registry,
    create_webhook_relay,
    load_protocol_client_factory,
)
from app.infra.stores import FileCredentialStore, MemoryCredentialStore, RedisCredentialStore
from app.infra.whatsapp import MediaStore, create_loopback_client
from app.sessions.registry import TenantRegistry
from config.settings import LOOPBACK_CLIENT_FACTORY, CredentialStoreSettings, WebhookSettings


class TestCreateCredentialStore:
    def test_file_backend(self, tmp_path) -> None:
        store = create_credential_store(
            CredentialStoreSettings(backend="file", directory=str(tmp_path))
        )

        assert isinstance(store, FileCredentialStore)
        assert store.base_dir == tmp_path

    def test_memory_backend(self) -> None:
        assert isinstance(
            create_credential_store(CredentialStoreSettings(backend="memory")),
            MemoryCredentialStore,
        )

    def test_redis_backend(self, monkeypatch) -> None:
        sentinel = object()
        monkeypatch.setattr(dependencies, "create_async_redis_client", lambda: sentinel)

        store = create_credential_store(
            CredentialStoreSettings(backend="redis", redis_prefix="t:")
        )

        assert isinstance(store, RedisCredentialStore)
        assert store._key("acme") == "t:acme"

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            create_credential_store(CredentialStoreSettings(backend="s3"))  # type: ignore[arg-type]


class TestLoadProtocolClientFactory:
    def test_loads_loopback(self) -> None:
        assert load_protocol_client_factory(LOOPBACK_CLIENT_FACTORY) is create_loopback_client

    @pytest.mark.parametrize("path", ["sem_separador", ":attr", "modulo:"])
    def test_malformed_path(self, path) -> None:
        with pytest.raises(ValueError):
            load_protocol_client_factory(path)

    def test_missing_module(self) -> None:
        with pytest.raises(ImportError):
            load_protocol_client_factory("modulo_que_nao_existe_xyz:create")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            load_protocol_client_factory("app.infra.whatsapp.loopback_client:nao_existe")

    def test_not_callable(self) -> None:
        with pytest.raises(TypeError):
            load_protocol_client_factory("app.infra.whatsapp.loopback_client:LOOPBACK_ACCOUNT_ID")


class TestCreateWiring:
    async def test_relay_disabled_without_base_url(self, caplog) -> None:
        relay = create_webhook_relay(WebhookSettings())

        assert "webhook_relay_disabled" in caplog.text
        await relay.aclose()

    async def test_registry_uses_given_factory(
        self,
        tmp_path,
        gateway_settings,
        address_policy,
        credential_store,
        relay,
        client_factory,
    ) -> None:
        registry = create_registry(
            relay=relay,
            credential_store=credential_store,
            client_factory=client_factory,
            gateway_settings=gateway_settings,
            address_policy=address_policy,
            media_store=MediaStore(tmp_path),
        )

        assert isinstance(registry, TenantRegistry)
        session = await registry.get_or_create("acme")
        await session.connect()

        assert client_factory.last.tenant_id == "acme"
        await registry.shutdown()
