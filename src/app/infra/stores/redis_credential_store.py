"""Redis Credential Store — um blob de credenciais por tenant.

Chaves sem TTL: credenciais só saem do Redis por logout,
delete explícito ou script de limpeza.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import PersistenceError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace de credenciais
CREDENTIALS_PREFIX = "wa_creds:"


class RedisCredentialStore(CredentialStoreProtocol):
    """Store de credenciais usando Redis assíncrono.

    Args:
        async_redis_client: Cliente Redis assíncrono
        prefix: Prefixo das chaves (default: wa_creds:)
    """

    def __init__(
        self,
        async_redis_client: AsyncRedis[bytes] | None,
        prefix: str = CREDENTIALS_PREFIX,
    ) -> None:
        self._async_redis = async_redis_client
        self._prefix = prefix

    def _key(self, tenant_id: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{self._prefix}{tenant_id}"

    def _client(self) -> AsyncRedis[bytes]:
        if self._async_redis is None:
            msg = "Async Redis client não configurado"
            raise RuntimeError(msg)
        return self._async_redis

    async def load_async(self, tenant_id: str) -> bytes | None:
        """Carrega blob do Redis."""
        client = self._client()
        try:
            data = await client.get(self._key(tenant_id))
        except RedisError as exc:
            raise PersistenceError(
                f"Falha ao carregar credenciais: {exc}", tenant_id=tenant_id
            ) from exc
        if data is None:
            return None
        return bytes(data)

    async def save_async(self, tenant_id: str, credentials: bytes) -> None:
        """Salva blob no Redis."""
        client = self._client()
        try:
            await client.set(self._key(tenant_id), credentials)
        except RedisError as exc:
            raise PersistenceError(
                f"Falha ao salvar credenciais: {exc}", tenant_id=tenant_id
            ) from exc
        logger.debug(
            "credentials_saved",
            extra={"tenant_id": tenant_id, "backend": "redis", "size": len(credentials)},
        )

    async def delete_async(self, tenant_id: str) -> bool:
        """Remove blob do Redis."""
        client = self._client()
        try:
            result = await client.delete(self._key(tenant_id))
        except RedisError as exc:
            raise PersistenceError(
                f"Falha ao remover credenciais: {exc}", tenant_id=tenant_id
            ) from exc
        return bool(result)

    async def exists_async(self, tenant_id: str) -> bool:
        """Verifica se há blob no Redis."""
        client = self._client()
        try:
            return bool(await client.exists(self._key(tenant_id)))
        except RedisError as exc:
            raise PersistenceError(
                f"Falha ao consultar credenciais: {exc}", tenant_id=tenant_id
            ) from exc

    async def list_tenants_async(self) -> list[str]:
        """Lista tenants com credenciais (SCAN, sem bloquear o servidor)."""
        client = self._client()
        tenants: list[str] = []
        try:
            async for key in client.scan_iter(match=f"{self._prefix}*"):
                raw = key.decode() if isinstance(key, bytes) else str(key)
                tenants.append(raw[len(self._prefix):])
        except RedisError as exc:
            raise PersistenceError(f"Falha ao listar credenciais: {exc}") from exc
        return sorted(tenants)

    async def ping_async(self) -> bool:
        """Verifica conectividade com o Redis."""
        return bool(await self._client().ping())
