"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

from app.protocols.credential_store import CredentialStoreProtocol


class MemoryCredentialStore(CredentialStoreProtocol):
    """Store de credenciais em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}

    async def load_async(self, tenant_id: str) -> bytes | None:
        """Carrega blob da memória."""
        return self._store.get(tenant_id)

    async def save_async(self, tenant_id: str, credentials: bytes) -> None:
        """Salva blob em memória (cópia imutável)."""
        self._store[tenant_id] = bytes(credentials)

    async def delete_async(self, tenant_id: str) -> bool:
        """Remove blob da memória."""
        return self._store.pop(tenant_id, None) is not None

    async def exists_async(self, tenant_id: str) -> bool:
        """Verifica se há blob para o tenant."""
        return tenant_id in self._store

    async def list_tenants_async(self) -> list[str]:
        """Lista tenants com credenciais."""
        return sorted(self._store)
