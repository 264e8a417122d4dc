"""Configuração de logging estruturado.

Re-exporta funções e classes para configuração de logging JSON.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="wa_gateway")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("tenant_connected", extra={"tenant_id": "t1"})

Campos obrigatórios em todo log:
- correlation_id
- service
- tenant_id (vazio fora de operações de tenant)
- level
- logger
- message
- asctime

Nunca logar texto de mensagens nem telefones completos (usar mask_address).
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import CorrelationIdFilter, mask_address
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    # Filters
    "CorrelationIdFilter",
    # Configuração principal
    "configure_logging",
    # Formatters
    "create_json_formatter",
    "get_logger",
    "log_fallback",
    "mask_address",
]
