"""Settings do credential store.

Um blob opaco de credenciais por tenant, persistido no backend escolhido.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

CredentialStoreBackend = Literal["memory", "redis", "file"]

_VALID_BACKENDS = ("memory", "redis", "file")


@dataclass(frozen=True)
class CredentialStoreSettings:
    """Configurações do credential store.

    Attributes:
        backend: Backend de persistência (memory|redis|file)
        directory: Diretório raiz do backend file
        redis_prefix: Prefixo das chaves no backend redis
    """

    backend: CredentialStoreBackend = "file"
    directory: str = "auth_info"
    redis_prefix: str = "wa_creds:"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações do credential store.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in _VALID_BACKENDS:
            errors.append(f"CREDENTIAL_STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append(
                "CREDENTIAL_STORE_BACKEND=memory proibido em staging/production. "
                "Use redis ou file."
            )

        if self.backend == "redis" and not base.redis_url:
            errors.append("CREDENTIAL_STORE_BACKEND=redis requer REDIS_URL configurado")

        if self.backend == "file" and not self.directory:
            errors.append("CREDENTIALS_DIR não pode ser vazio")

        if self.backend == "redis" and not self.redis_prefix:
            errors.append("CREDENTIALS_REDIS_PREFIX não pode ser vazio")

        return errors


def _load_credentials_from_env() -> CredentialStoreSettings:
    """Carrega CredentialStoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("CREDENTIAL_STORE_BACKEND", "file").lower()
    backend: CredentialStoreBackend = (
        backend_str if backend_str in _VALID_BACKENDS else "file"  # type: ignore[assignment]
    )
    return CredentialStoreSettings(
        backend=backend,
        directory=os.getenv("CREDENTIALS_DIR", os.getenv("AUTH_DIR", "auth_info")),
        redis_prefix=os.getenv("CREDENTIALS_REDIS_PREFIX", "wa_creds:"),
    )


@lru_cache(maxsize=1)
def get_credential_store_settings() -> CredentialStoreSettings:
    """Retorna instância cacheada de CredentialStoreSettings."""
    return _load_credentials_from_env()
