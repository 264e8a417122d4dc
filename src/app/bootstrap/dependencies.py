"""Factories de dependências — criação de implementações concretas.

Centraliza a escolha de backends a partir das settings e o wiring
TenantRegistry → TenantSession → (protocol client, store, relay).
"""

from __future__ import annotations

import importlib
import logging
from functools import partial
from typing import TYPE_CHECKING

from app.bootstrap.clients import create_async_redis_client
from app.infra.stores import FileCredentialStore, MemoryCredentialStore, RedisCredentialStore
from app.infra.webhook import WebhookRelay
from app.infra.whatsapp import MediaStore
from app.sessions.inbound import InboundProcessor
from app.sessions.registry import TenantRegistry
from app.sessions.tenant_session import TenantSession
from config.settings import (
    get_address_policy_settings,
    get_base_settings,
    get_credential_store_settings,
    get_gateway_settings,
    get_webhook_settings,
)

if TYPE_CHECKING:
    import httpx

    from app.protocols.credential_store import CredentialStoreProtocol
    from app.protocols.protocol_client import ProtocolClientFactory
    from config.settings import (
        AddressPolicySettings,
        CredentialStoreSettings,
        GatewaySettings,
        WebhookSettings,
    )

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Credential Store Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_credential_store(
    settings: CredentialStoreSettings | None = None,
) -> CredentialStoreProtocol:
    """Cria credential store baseado na configuração.

    Lê CREDENTIAL_STORE_BACKEND:
    - "memory": MemoryCredentialStore (dev only)
    - "redis": RedisCredentialStore
    - "file": FileCredentialStore (um diretório por tenant)

    Returns:
        Implementação de CredentialStoreProtocol

    Raises:
        ValueError: Backend desconhecido ou REDIS_URL ausente
    """
    settings = settings or get_credential_store_settings()
    backend = settings.backend

    if backend == "redis":
        store: CredentialStoreProtocol = RedisCredentialStore(
            create_async_redis_client(), prefix=settings.redis_prefix
        )
        logger.info("credential_store_created", extra={"backend": "redis"})
        return store

    if backend == "file":
        store = FileCredentialStore(settings.directory)
        logger.info(
            "credential_store_created",
            extra={"backend": "file", "directory": settings.directory},
        )
        return store

    if backend == "memory":
        environment = get_base_settings().environment
        if environment != "development":
            logger.warning(
                "memory_store_in_non_dev",
                extra={"backend": "memory", "environment": environment},
            )
        store = MemoryCredentialStore()
        logger.info("credential_store_created", extra={"backend": "memory"})
        return store

    msg = f"CREDENTIAL_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Protocol Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def load_protocol_client_factory(dotted_path: str) -> ProtocolClientFactory:
    """Resolve a factory de protocol clients a partir de "modulo:atributo".

    Raises:
        ValueError: Caminho mal formado
        ImportError: Módulo inexistente
        AttributeError: Atributo inexistente
        TypeError: Atributo não é chamável
    """
    module_name, sep, attribute = dotted_path.partition(":")
    if not sep or not module_name or not attribute:
        msg = f"PROTOCOL_CLIENT_FACTORY deve ter formato modulo:atributo, recebido {dotted_path!r}"
        raise ValueError(msg)

    module = importlib.import_module(module_name)
    factory = getattr(module, attribute)
    if not callable(factory):
        msg = f"{dotted_path} não é chamável"
        raise TypeError(msg)

    logger.info("protocol_client_factory_loaded", extra={"factory": dotted_path})
    return factory


# ──────────────────────────────────────────────────────────────────────────────
# Relay, mídia e registry
# ──────────────────────────────────────────────────────────────────────────────


def create_webhook_relay(
    settings: WebhookSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> WebhookRelay:
    settings = settings or get_webhook_settings()
    if not settings.enabled:
        logger.warning("webhook_relay_disabled", extra={"reason": "no_base_url"})
    return WebhookRelay(settings, http_client)


def create_media_store(settings: GatewaySettings | None = None) -> MediaStore:
    settings = settings or get_gateway_settings()
    return MediaStore(settings.media_upload_dir, url_prefix=settings.media_url_prefix)


def create_registry(
    *,
    relay: WebhookRelay,
    credential_store: CredentialStoreProtocol,
    client_factory: ProtocolClientFactory | None = None,
    gateway_settings: GatewaySettings | None = None,
    address_policy: AddressPolicySettings | None = None,
    media_store: MediaStore | None = None,
) -> TenantRegistry:
    """Monta o TenantRegistry com a factory de sessões configurada.

    Args:
        relay: Relay compartilhado por todas as sessões
        credential_store: Store compartilhado por todas as sessões
        client_factory: Factory de protocol clients (default: PROTOCOL_CLIENT_FACTORY)
        gateway_settings: Parâmetros de sessão (default: env)
        address_policy: Política de endereços (default: env)
        media_store: Armazenamento de mídias recebidas (default: MEDIA_UPLOAD_DIR)
    """
    gateway_settings = gateway_settings or get_gateway_settings()
    address_policy = address_policy or get_address_policy_settings()
    if client_factory is None:
        client_factory = load_protocol_client_factory(gateway_settings.protocol_client_factory)
    if gateway_settings.uses_loopback_client:
        logger.warning("loopback_protocol_client_in_use")

    inbound = InboundProcessor(
        relay,
        media_store or create_media_store(gateway_settings),
        address_policy,
    )
    session_factory = partial(
        TenantSession,
        client_factory=client_factory,
        credential_store=credential_store,
        relay=relay,
        inbound=inbound,
        settings=gateway_settings,
        address_policy=address_policy,
    )
    return TenantRegistry(session_factory, credential_store, inbound)
