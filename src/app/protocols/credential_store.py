"""Protocolo de persistência de credenciais por tenant.

O blob é opaco para o gateway: apenas o protocol client
sabe interpretá-lo.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CredentialStoreProtocol(ABC):
    """Contrato assíncrono de armazenamento de credenciais.

    Falhas de I/O do backend devem ser levantadas como PersistenceError.
    """

    @abstractmethod
    async def load_async(self, tenant_id: str) -> bytes | None: ...

    @abstractmethod
    async def save_async(self, tenant_id: str, credentials: bytes) -> None: ...

    @abstractmethod
    async def delete_async(self, tenant_id: str) -> bool: ...

    @abstractmethod
    async def exists_async(self, tenant_id: str) -> bool: ...

    @abstractmethod
    async def list_tenants_async(self) -> list[str]: ...

    async def ping_async(self) -> bool:
        """Verifica disponibilidade do backend (readiness)."""
        return True
