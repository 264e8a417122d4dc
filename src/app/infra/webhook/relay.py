"""WebhookRelay — entrega best-effort de eventos ao consumidor downstream.

Semântica at-most-once: timeout, erro de conexão ou status não-2xx
são registrados em log e descartados, sem fila de retry.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from api.payload_builders.whatsapp import build_webhook_payload
from app.infra.webhook.tasks import BackgroundTaskTracker
from app.observability import record_latency, record_webhook_delivery
from app.sessions.models import MessageWebhookEvent

if TYPE_CHECKING:
    from app.sessions.models import WebhookEvent
    from config.settings import WebhookSettings

logger = logging.getLogger(__name__)

WEBHOOK_TOKEN_HEADER = "X-Webhook-Token"


class WebhookRelay:
    """Publica eventos de mensagem e de status via HTTP POST.

    Args:
        settings: Destinos, timeouts e token
        http_client: Cliente compartilhado (criado e possuído pelo relay se None)
    """

    def __init__(
        self,
        settings: WebhookSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()
        self._tasks = BackgroundTaskTracker(settings.max_concurrency, name="webhook_relay")

    @property
    def pending_deliveries(self) -> int:
        return self._tasks.active_count

    def _target(self, event: WebhookEvent) -> tuple[str, str, float]:
        if isinstance(event, MessageWebhookEvent):
            return "message", self._settings.message_url, self._settings.message_timeout_seconds
        return "status", self._settings.status_url, self._settings.status_timeout_seconds

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.token:
            headers[WEBHOOK_TOKEN_HEADER] = self._settings.token
        return headers

    async def deliver(self, event: WebhookEvent) -> bool:
        """Entrega um evento; nunca levanta exceção de transporte.

        Returns:
            True se o consumidor respondeu 2xx
        """
        kind, url, timeout = self._target(event)
        tenant_id = event.tenant_id

        if not self._settings.enabled:
            logger.debug("webhook_skipped_no_target", extra={"tenant_id": tenant_id, "kind": kind})
            record_webhook_delivery(kind, "skipped", tenant_id=tenant_id)
            return False

        payload = build_webhook_payload(event)
        start = time.perf_counter()
        try:
            response = await self._http.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=timeout,
            )
        except httpx.TimeoutException:
            logger.warning(
                "webhook_delivery_timeout",
                extra={"tenant_id": tenant_id, "kind": kind, "timeout_seconds": timeout},
            )
            record_webhook_delivery(kind, "failed", tenant_id=tenant_id)
            return False
        except httpx.HTTPError as exc:
            logger.warning(
                "webhook_delivery_error",
                extra={"tenant_id": tenant_id, "kind": kind, "error_type": type(exc).__name__},
            )
            record_webhook_delivery(kind, "failed", tenant_id=tenant_id)
            return False

        record_latency(
            "webhook_relay",
            kind,
            (time.perf_counter() - start) * 1000,
            tenant_id=tenant_id,
        )
        if not response.is_success:
            logger.warning(
                "webhook_delivery_rejected",
                extra={"tenant_id": tenant_id, "kind": kind, "status_code": response.status_code},
            )
            record_webhook_delivery(
                kind, "failed", tenant_id=tenant_id, status_code=response.status_code
            )
            return False

        record_webhook_delivery(
            kind, "delivered", tenant_id=tenant_id, status_code=response.status_code
        )
        return True

    def dispatch(self, event: WebhookEvent) -> None:
        """Agenda deliver em background (fire-and-forget)."""
        self._tasks.schedule(self.deliver(event), tenant_id=event.tenant_id)

    async def drain(self, timeout_seconds: float = 10.0) -> None:
        """Aguarda entregas pendentes (shutdown)."""
        await self._tasks.drain(timeout_seconds)

    async def aclose(self) -> None:
        """Fecha o cliente HTTP se pertencer ao relay."""
        if self._owns_client:
            await self._http.aclose()
