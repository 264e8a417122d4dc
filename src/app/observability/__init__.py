"""Observabilidade — logs estruturados, correlation_id e métricas.

Re-exporta funções de correlation_id e métricas para uso em toda a aplicação.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_state_transition
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_latency,
    record_reconnect_scheduled,
    record_state_transition,
    record_webhook_delivery,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "record_latency",
    "record_reconnect_scheduled",
    "record_state_transition",
    "record_webhook_delivery",
    "reset_correlation_id",
    "set_correlation_id",
]
