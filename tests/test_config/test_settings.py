"""Testes das settings do gateway (defaults, env e validate)."""

from __future__ import annotations

import pytest

from config.settings import (
    LOOPBACK_CLIENT_FACTORY,
    AddressPolicySettings,
    BaseSettings,
    CredentialStoreSettings,
    GatewaySettings,
    WebhookSettings,
)
from config.settings import address_policy as address_policy_module
from config.settings import gateway as gateway_module
from config.settings import webhook as webhook_module
from config.settings.base import core as core_module
from config.settings.base import credentials as credentials_module


class TestBaseSettings:
    def test_environment_aliases(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "prod")
        settings = core_module._load_base_from_env()

        assert settings.environment == "production"
        assert settings.is_production

    def test_unknown_environment_falls_back_to_development(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "qa")
        assert core_module._load_base_from_env().is_development

    def test_validate_requires_service_name(self) -> None:
        assert BaseSettings(service_name="").validate() == ["SERVICE_NAME não pode ser vazio"]


class TestCredentialStoreSettings:
    def test_defaults_to_file_backend(self, monkeypatch) -> None:
        monkeypatch.delenv("CREDENTIAL_STORE_BACKEND", raising=False)
        monkeypatch.delenv("CREDENTIALS_DIR", raising=False)
        monkeypatch.setenv("AUTH_DIR", "/data/auth")

        settings = credentials_module._load_credentials_from_env()

        assert settings.backend == "file"
        assert settings.directory == "/data/auth"

    def test_memory_forbidden_outside_development(self) -> None:
        settings = CredentialStoreSettings(backend="memory")

        assert settings.validate(BaseSettings(environment="development")) == []
        errors = settings.validate(BaseSettings(environment="production"))
        assert any("memory" in error for error in errors)

    def test_redis_requires_url(self) -> None:
        settings = CredentialStoreSettings(backend="redis")

        assert settings.validate(BaseSettings()) != []
        assert settings.validate(BaseSettings(redis_url="redis://localhost:6379/0")) == []


class TestGatewaySettings:
    def test_defaults(self) -> None:
        settings = GatewaySettings()

        assert settings.max_reconnect_attempts == 5
        assert settings.reconnect_base_delay_seconds == 5.0
        assert settings.reconnect_max_delay_seconds == 60.0
        assert settings.pairing_challenge_ttl_seconds == 60.0
        assert settings.protocol_client_factory == LOOPBACK_CLIENT_FACTORY
        assert settings.uses_loopback_client

    def test_loads_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("GATEWAY_MAX_RECONNECT_ATTEMPTS", "3")
        monkeypatch.setenv("GATEWAY_RECONNECT_BASE_DELAY_SECONDS", "2")
        monkeypatch.setenv("PROTOCOL_CLIENT_FACTORY", "binding.client:create")
        monkeypatch.setenv("GATEWAY_RESTORE_ON_STARTUP", "true")
        monkeypatch.setenv("GATEWAY_API_TOKEN", "s3cret")
        monkeypatch.setenv("MEDIA_SEND_DIR", "/srv/outbound")

        settings = gateway_module._load_from_env()

        assert settings.max_reconnect_attempts == 3
        assert settings.reconnect_base_delay_seconds == 2.0
        assert settings.protocol_client_factory == "binding.client:create"
        assert settings.restore_on_startup is True
        assert settings.api_token == "s3cret"
        assert settings.media_send_dir == "/srv/outbound"
        assert not settings.uses_loopback_client

    def test_loopback_and_missing_token_rejected_in_production(self) -> None:
        settings = GatewaySettings()

        assert settings.validate(is_development=True) == []
        errors = settings.validate(is_development=False)
        assert any("loopback" in error for error in errors)
        assert any("GATEWAY_API_TOKEN" in error for error in errors)

    def test_inconsistent_backoff_is_reported(self) -> None:
        settings = GatewaySettings(reconnect_base_delay_seconds=10, reconnect_max_delay_seconds=5)

        assert any("MAX_DELAY" in error for error in settings.validate())

    def test_factory_path_format(self) -> None:
        errors = GatewaySettings(protocol_client_factory="sem_dois_pontos").validate()
        assert any("modulo:atributo" in error for error in errors)

    def test_empty_media_send_dir_rejected(self) -> None:
        errors = GatewaySettings(media_send_dir="").validate()
        assert any("MEDIA_SEND_DIR" in error for error in errors)


class TestWebhookSettings:
    def test_disabled_without_base_url(self) -> None:
        assert not WebhookSettings().enabled

    def test_urls_join_base_and_paths(self) -> None:
        settings = WebhookSettings(base_url="https://crm.example.com/")

        assert settings.message_url == "https://crm.example.com/webhook/whatsapp"
        assert settings.status_url == "https://crm.example.com/api/whatsapp/webhook/status"

    def test_production_prefers_production_url(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DOWNSTREAM_BASE_URL", "http://localhost:3000")
        monkeypatch.setenv("DOWNSTREAM_BASE_URL_PRODUCTION", "https://crm.example.com")

        assert webhook_module._load_from_env().base_url == "https://crm.example.com"

    def test_development_ignores_production_url(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("DOWNSTREAM_BASE_URL", "http://localhost:3000")
        monkeypatch.setenv("DOWNSTREAM_BASE_URL_PRODUCTION", "https://crm.example.com")

        assert webhook_module._load_from_env().base_url == "http://localhost:3000"

    @pytest.mark.parametrize(
        "settings",
        [
            WebhookSettings(base_url="crm.example.com"),
            WebhookSettings(message_timeout_seconds=0),
            WebhookSettings(max_concurrency=0),
        ],
    )
    def test_invalid_values(self, settings) -> None:
        assert settings.validate() != []


class TestAddressPolicySettings:
    def test_defaults_accept_brazil_only(self) -> None:
        settings = AddressPolicySettings()

        assert settings.allowed_country_codes == {"55"}
        assert (settings.min_length, settings.max_length) == (12, 13)
        assert settings.validate() == []

    def test_csv_env_values(self, monkeypatch) -> None:
        monkeypatch.setenv("ALLOWED_COUNTRY_CODES", "55, 351,")
        monkeypatch.setenv("ALLOWED_SENDERS", "5511911112222,5511933334444")

        settings = address_policy_module._load_from_env()

        assert settings.allowed_country_codes == {"55", "351"}
        assert settings.allowed_senders == {"5511911112222", "5511933334444"}

    def test_invalid_policy(self) -> None:
        assert AddressPolicySettings(allowed_country_codes=frozenset()).validate() != []
        assert AddressPolicySettings(min_length=14, max_length=13).validate() != []
