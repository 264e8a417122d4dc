"""
Classificação de quedas de conexão e política de reconexão.

Quedas por logout (sessão revogada no celular ou credenciais recusadas)
limpam credenciais e nunca reconectam. Qualquer outra queda é retentável
dentro do orçamento, com backoff exponencial limitado.
"""

from dataclasses import dataclass
from enum import StrEnum


class DisconnectKind(StrEnum):
    """Categoria de uma queda de conexão."""

    LOGOUT = "logout"
    RETRYABLE = "retryable"

    def __str__(self) -> str:
        return self.value


# 401: sessão deslogada/não autorizada; 403: conta bloqueada
LOGOUT_STATUS_CODES: frozenset[int] = frozenset({401, 403})
LOGOUT_REASONS: frozenset[str] = frozenset({"logged_out", "logout", "unauthorized"})


def classify_disconnect(status_code: int | None, reason: str | None) -> DisconnectKind:
    """
    Classifica uma queda a partir do código e do motivo informados pelo cliente.

    Args:
        status_code: Código de status da queda (pode ser ausente)
        reason: Motivo textual (case-insensitive)

    Returns:
        DisconnectKind.LOGOUT ou DisconnectKind.RETRYABLE
    """
    if status_code in LOGOUT_STATUS_CODES:
        return DisconnectKind.LOGOUT
    if reason and reason.strip().lower() in LOGOUT_REASONS:
        return DisconnectKind.LOGOUT
    return DisconnectKind.RETRYABLE


def compute_backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay da tentativa N (1-based): min(base * 2^(N-1), max)."""
    if attempt < 1:
        raise ValueError("attempt deve ser >= 1")
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


@dataclass(frozen=True, slots=True)
class ReconnectDecision:
    """
    Decisão após uma queda retentável.

    Attributes:
        schedule: Se um timer de reconexão deve ser armado
        attempt: Valor do contador de tentativas após a decisão
        delay_seconds: Delay do timer (0.0 quando schedule=False)
    """

    schedule: bool
    attempt: int
    delay_seconds: float = 0.0


def decide_reconnect(
    attempts: int,
    *,
    max_attempts: int,
    base_delay: float,
    max_delay: float,
) -> ReconnectDecision:
    """
    Decide se uma queda retentável agenda reconexão ou esgota o orçamento.

    Args:
        attempts: Tentativas já consumidas antes desta queda
        max_attempts: Orçamento total de reconexões
        base_delay: Delay base do backoff
        max_delay: Teto do backoff

    Returns:
        ReconnectDecision; o contador nunca ultrapassa max_attempts
    """
    if attempts >= max_attempts:
        return ReconnectDecision(schedule=False, attempt=min(attempts, max_attempts))

    attempt = attempts + 1
    return ReconnectDecision(
        schedule=True,
        attempt=attempt,
        delay_seconds=compute_backoff_delay(attempt, base_delay, max_delay),
    )
