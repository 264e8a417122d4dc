"""Agregador de settings do gateway.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Address policy
from config.settings.address_policy import (
    AddressPolicySettings,
    get_address_policy_settings,
)

# Base settings
from config.settings.base import (
    BaseSettings,
    CredentialStoreBackend,
    CredentialStoreSettings,
    Environment,
    get_base_settings,
    get_credential_store_settings,
)

# Gateway settings
from config.settings.gateway import (
    LOOPBACK_CLIENT_FACTORY,
    GatewaySettings,
    get_gateway_settings,
)

# Webhook settings
from config.settings.webhook import (
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    # Constants
    "LOOPBACK_CLIENT_FACTORY",
    # Address policy
    "AddressPolicySettings",
    # Base
    "BaseSettings",
    "CredentialStoreBackend",
    "CredentialStoreSettings",
    "Environment",
    # Gateway
    "GatewaySettings",
    # Webhook
    "WebhookSettings",
    "get_address_policy_settings",
    "get_base_settings",
    "get_credential_store_settings",
    "get_gateway_settings",
    "get_webhook_settings",
]
