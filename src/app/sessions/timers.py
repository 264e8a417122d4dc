"""Timer único por finalidade (reconexão, expiração de QR).

Armar um timer cancela o pendente: nunca há mais de uma task
viva por instância.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SessionTimer:
    """Agenda uma callback assíncrona após um delay.

    Args:
        name: Finalidade do timer (para logs)
        tenant_id: Tenant dono do timer
    """

    __slots__ = ("_name", "_task", "_tenant_id")

    def __init__(self, name: str, tenant_id: str) -> None:
        self._name = name
        self._tenant_id = tenant_id
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, delay_seconds: float, callback: Callable[[], Awaitable[None]]) -> None:
        """Cancela o timer pendente e arma um novo."""
        self.cancel()
        self._task = asyncio.create_task(
            self._run(delay_seconds, callback),
            name=f"{self._name}:{self._tenant_id}",
        )

    def cancel(self) -> bool:
        """Cancela o timer pendente; retorna True se havia um."""
        task = self._task
        self._task = None
        if task is None or task.done() or task is asyncio.current_task():
            return False
        task.cancel()
        return True

    async def _run(self, delay_seconds: float, callback: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(delay_seconds)
        # Disparou: a callback pode armar um novo timer sem cancelar esta task
        if self._task is asyncio.current_task():
            self._task = None
        try:
            await callback()
        except Exception:
            logger.exception(
                "session_timer_callback_failed",
                extra={"tenant_id": self._tenant_id, "timer": self._name},
            )
