"""Configuração do pytest para o gateway WhatsApp multi-tenant."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from app.infra.stores import MemoryCredentialStore  # noqa: E402
from config.settings import AddressPolicySettings, GatewaySettings  # noqa: E402
from tests.fakes.fake_protocol_client import FakeClientFactory, RecordingRelay  # noqa: E402


@pytest.fixture
def gateway_settings(tmp_path: Path) -> GatewaySettings:
    """Settings com delays curtos para testes de timers; mídia enviada sai de tmp_path."""
    return GatewaySettings(
        max_reconnect_attempts=5,
        reconnect_base_delay_seconds=0.01,
        reconnect_max_delay_seconds=0.05,
        pairing_challenge_ttl_seconds=60.0,
        connect_timeout_seconds=1.0,
        close_timeout_seconds=0.5,
        send_timeout_seconds=1.0,
        media_send_dir=str(tmp_path),
    )


@pytest.fixture
def address_policy() -> AddressPolicySettings:
    return AddressPolicySettings()


@pytest.fixture
def credential_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def relay() -> RecordingRelay:
    return RecordingRelay()


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()
