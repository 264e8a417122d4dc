"""Filters de logging para injeção de contexto.

Campos injetados:
- correlation_id: ID de rastreamento da requisição
- service: Nome do serviço
- tenant_id: vazio quando o chamador não informa via `extra`
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

_VISIBLE_SUFFIX = 4


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id, service e tenant_id em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca filtra.

        Valores passados explicitamente via `extra` são preservados.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        if not getattr(record, "tenant_id", None):
            record.tenant_id = ""
        return True


def mask_address(address: str | None) -> str:
    """Mascara endereço/telefone para logs, mantendo só o sufixo.

    Exemplo:
        mask_address("5511999998888@s.whatsapp.net") -> "***8888"
    """
    if not address:
        return ""
    digits = address.split("@", 1)[0]
    if len(digits) <= _VISIBLE_SUFFIX:
        return "***"
    return f"***{digits[-_VISIBLE_SUFFIX:]}"
