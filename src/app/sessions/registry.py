"""TenantRegistry — fonte única das sessões vivas do processo.

Sessões são criadas na primeira referência (get_or_create) ou
explicitamente (create) e destruídas apenas por delete ou clear.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from utils.errors import AlreadyExistsError, GatewayError, TenantNotFoundError

if TYPE_CHECKING:
    from app.protocols.credential_store import CredentialStoreProtocol
    from app.sessions.inbound import InboundProcessor
    from app.sessions.models import TenantStatus
    from app.sessions.tenant_session import TenantSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], "TenantSession"]
INBOUND_DRAIN_TIMEOUT_SECONDS = 5.0


class TenantRegistry:
    """Mapa tenant_id → TenantSession com criação serializada por id.

    Args:
        session_factory: Cria uma sessão IDLE para um tenant
        credential_store: Store usado em restore e delete de tenants sem sessão
        inbound: Pipeline de entrada compartilhado, drenado no shutdown
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        credential_store: CredentialStoreProtocol,
        inbound: InboundProcessor | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._store = credential_store
        self._inbound = inbound
        self._sessions: dict[str, TenantSession] = {}
        # Um lock por id, nunca removido: criação e delete do mesmo id se serializam
        self._creation_locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._sessions

    def find(self, tenant_id: str) -> TenantSession | None:
        """Retorna a sessão, ou None se não existir."""
        return self._sessions.get(tenant_id)

    async def get_or_create(self, tenant_id: str) -> TenantSession:
        """Retorna a sessão existente ou cria uma nova (IDLE, sem conectar)."""
        session = self._sessions.get(tenant_id)
        if session is not None:
            return session

        lock = self._creation_locks.setdefault(tenant_id, asyncio.Lock())
        async with lock:
            session = self._sessions.get(tenant_id)
            if session is None:
                session = self._session_factory(tenant_id)
                self._sessions[tenant_id] = session
                logger.info(
                    "tenant_session_created",
                    extra={"tenant_id": tenant_id, "total_sessions": len(self._sessions)},
                )
        return session

    async def create(self, tenant_id: str) -> TenantSession:
        """Cria sessão explicitamente.

        Raises:
            AlreadyExistsError: Se o tenant já possui sessão
        """
        if tenant_id in self._sessions:
            raise AlreadyExistsError("Tenant já existe", tenant_id=tenant_id)
        return await self.get_or_create(tenant_id)

    def get(self, tenant_id: str) -> TenantSession:
        """Retorna a sessão.

        Raises:
            TenantNotFoundError: Se o tenant não possui sessão
        """
        session = self._sessions.get(tenant_id)
        if session is None:
            raise TenantNotFoundError("Tenant não encontrado", tenant_id=tenant_id)
        return session

    async def disconnect(self, tenant_id: str) -> None:
        """Desconecta a sessão existente mantendo credenciais.

        Raises:
            TenantNotFoundError: Se o tenant não possui sessão
        """
        await self.get(tenant_id).disconnect()

    async def delete(self, tenant_id: str) -> bool:
        """Destrói a sessão e remove suas credenciais.

        O lock de criação do id fica tomado até o blob ser removido:
        um get_or_create concorrente só cria a sessão nova depois disso.

        Returns:
            True se havia sessão; False se não havia (credenciais
            persistidas de um processo anterior são removidas mesmo assim)
        """
        lock = self._creation_locks.setdefault(tenant_id, asyncio.Lock())
        async with lock:
            session = self._sessions.pop(tenant_id, None)
            if session is None:
                logger.info("tenant_delete_missing", extra={"tenant_id": tenant_id})
                await self._store.delete_async(tenant_id)
                return False

            await session.destroy()
        logger.info(
            "tenant_deleted",
            extra={"tenant_id": tenant_id, "total_sessions": len(self._sessions)},
        )
        return True

    def iter_status(self) -> Iterator[TenantStatus]:
        """Gera snapshots sob demanda sobre uma cópia do mapa."""
        for session in list(self._sessions.values()):
            yield session.status()

    def list_status(self) -> list[TenantStatus]:
        return list(self.iter_status())

    async def clear(self) -> int:
        """Destrói todas as sessões; retorna quantas existiam."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        results = await asyncio.gather(
            *(session.destroy() for session in sessions),
            return_exceptions=True,
        )
        for session, result in zip(sessions, results, strict=True):
            if isinstance(result, Exception):
                logger.error(
                    "tenant_destroy_failed",
                    extra={"tenant_id": session.tenant_id, "error_type": type(result).__name__},
                )
        logger.info("tenants_cleared", extra={"cleared": len(sessions)})
        return len(sessions)

    async def restore(self) -> int:
        """Cria e conecta sessões de todos os tenants com credenciais salvas."""
        tenant_ids = await self._store.list_tenants_async()
        restored = 0
        for tenant_id in tenant_ids:
            session = await self.get_or_create(tenant_id)
            try:
                await session.connect()
            except GatewayError as exc:
                logger.warning(
                    "tenant_restore_failed",
                    extra={"tenant_id": tenant_id, "error_type": type(exc).__name__},
                )
                continue
            restored += 1
        logger.info(
            "tenants_restored",
            extra={"restored": restored, "found": len(tenant_ids)},
        )
        return restored

    async def shutdown(self) -> None:
        """Encerra todas as sessões mantendo credenciais (parada do processo)."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        results = await asyncio.gather(
            *(session.close() for session in sessions),
            return_exceptions=True,
        )
        if self._inbound is not None:
            await self._inbound.drain(INBOUND_DRAIN_TIMEOUT_SECONDS)
        failures = sum(1 for result in results if isinstance(result, Exception))
        logger.info(
            "tenant_registry_shutdown",
            extra={"closed": len(sessions) - failures, "failed": failures},
        )
