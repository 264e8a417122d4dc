"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.credentials import (
    CredentialStoreBackend,
    CredentialStoreSettings,
    get_credential_store_settings,
)

__all__ = [
    # Core
    "BaseSettings",
    # Credentials
    "CredentialStoreBackend",
    "CredentialStoreSettings",
    # Types
    "Environment",
    "get_base_settings",
    "get_credential_store_settings",
]
