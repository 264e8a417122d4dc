"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    AlreadyExistsError,
    GatewayError,
    InfrastructureError,
    InvalidAddressError,
    InvalidMediaError,
    NotConnectedError,
    PersistenceError,
    TenantNotFoundError,
    TransportError,
)

__all__ = [
    "AlreadyExistsError",
    "GatewayError",
    "InfrastructureError",
    "InvalidAddressError",
    "InvalidMediaError",
    "NotConnectedError",
    "PersistenceError",
    "TenantNotFoundError",
    "TransportError",
]
