"""Exceções de domínio do gateway multi-tenant.

Erros de operação são sempre escopados a um tenant: a camada HTTP
traduz cada classe para um status code e um corpo estruturado.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base para erros de operação de um tenant."""

    error_code = "gateway_error"

    def __init__(self, message: str, *, tenant_id: str | None = None) -> None:
        super().__init__(message)
        self.tenant_id = tenant_id


class NotConnectedError(GatewayError):
    """Envio tentado fora do estado CONNECTED."""

    error_code = "not_connected"


class InvalidAddressError(GatewayError):
    """Endereço de destino não passa na política de validação."""

    error_code = "invalid_address"


class InvalidMediaError(GatewayError):
    """Tipo de mídia desconhecido ou arquivo inexistente."""

    error_code = "invalid_media"


class AlreadyExistsError(GatewayError):
    """Criação duplicada de tenant."""

    error_code = "already_exists"


class TenantNotFoundError(GatewayError):
    """Tenant não registrado."""

    error_code = "tenant_not_found"


class TransportError(GatewayError):
    """Falha do ProtocolClient (connect, send, timeout)."""

    error_code = "transport_error"


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class PersistenceError(GatewayError, InfrastructureError):
    """Falha do credential store. Não derruba a sessão em memória."""

    error_code = "persistence_error"
