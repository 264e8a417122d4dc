"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente (BigQuery, CloudWatch Insights, Loki, etc.).

Métricas suportadas:
- Latência: histogram de tempos de execução por componente/operação
- Transições: counter de mudanças de estado por tenant
- Reconexões: counter de reconexões agendadas com delay
- Webhooks: counter de entregas por tipo e resultado

Uso:
    from app.observability.metrics import record_latency, record_state_transition

    start = time.perf_counter()
    # ... operação ...
    latency_ms = (time.perf_counter() - start) * 1000
    record_latency("tenant_session", "send_text", latency_ms, tenant_id="acme")
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
    tenant_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "tenant_session", "webhook_relay")
        operation: Nome da operação (ex: "connect", "send_text")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
        tenant_id: Tenant dono da operação
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
            "tenant_id": tenant_id,
        },
    )


def record_state_transition(
    tenant_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    generation: int,
) -> None:
    """Registra transição de estado da conexão de um tenant."""
    logger.info(
        "metric_state_transition",
        extra={
            "metric_type": "state_transition",
            "component": "tenant_session",
            "tenant_id": tenant_id,
            "from_state": from_state,
            "to_state": to_state,
            "trigger": trigger,
            "generation": generation,
        },
    )


def record_reconnect_scheduled(
    tenant_id: str,
    attempt: int,
    delay_seconds: float,
    max_attempts: int,
) -> None:
    """Registra reconexão agendada.

    Args:
        tenant_id: Tenant afetado
        attempt: Número da tentativa (1-based)
        delay_seconds: Delay até a tentativa
        max_attempts: Orçamento total de tentativas
    """
    logger.info(
        "metric_reconnect_scheduled",
        extra={
            "metric_type": "reconnect",
            "component": "tenant_session",
            "tenant_id": tenant_id,
            "attempt": attempt,
            "delay_seconds": delay_seconds,
            "max_attempts": max_attempts,
        },
    )


def record_webhook_delivery(
    kind: str,
    outcome: str,
    tenant_id: str | None = None,
    status_code: int | None = None,
) -> None:
    """Registra resultado de entrega de webhook (delivered|failed|skipped)."""
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "component": "webhook_relay",
            "kind": kind,
            "outcome": outcome,
            "tenant_id": tenant_id,
            "status_code": status_code,
        },
    )
