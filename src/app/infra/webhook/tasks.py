"""Controle de tasks assíncronas em background (webhooks e enriquecimento)."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 100


class BackgroundTaskTracker:
    """Agenda coroutines em background com limite de concorrência.

    Mantém referência forte das tasks até terminarem e permite
    aguardá-las no shutdown.
    """

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY, name: str = "webhook") -> None:
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._active_tasks: set[asyncio.Task[Any]] = set()
        self._name = name

    @property
    def active_count(self) -> int:
        return len(self._active_tasks)

    def schedule(self, coroutine: Awaitable[Any], *, tenant_id: str | None = None) -> int:
        """Agenda task; retorna quantidade de tasks ativas."""
        task = asyncio.create_task(self._run_with_limit(coroutine))
        self._active_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.debug(
            "background_task_scheduled",
            extra={
                "component": self._name,
                "tenant_id": tenant_id,
                "active_tasks": len(self._active_tasks),
            },
        )
        return len(self._active_tasks)

    async def _run_with_limit(self, coroutine: Awaitable[Any]) -> None:
        async with self._semaphore:
            await coroutine

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._active_tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "background_task_failed",
                    extra={
                        "component": self._name,
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._active_tasks),
                    },
                )

    async def join(self) -> None:
        """Aguarda até não restar task ativa, sem cancelar nenhuma."""
        while self._active_tasks:
            await asyncio.gather(*self._active_tasks, return_exceptions=True)

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda tasks pendentes; cancela as que excederem o timeout."""
        if not self._active_tasks:
            return

        pending_now = list(self._active_tasks)
        logger.info(
            "background_tasks_shutdown_wait",
            extra={
                "component": self._name,
                "pending_tasks": len(pending_now),
                "timeout_seconds": timeout_seconds,
            },
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "background_tasks_shutdown_cancelled",
            extra={"component": self._name, "cancelled_tasks": len(pending)},
        )
