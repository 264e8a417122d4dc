"""Eventos emitidos pelo protocol client para o TenantSession.

O cliente nunca altera estado da sessão diretamente: ele apenas
emite estes eventos, que entram na fila da sessão e são aplicados
em ordem sob o lock do tenant.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PairingChallengeIssued:
    """Novo QR de pareamento (também emitido a cada rotação)."""

    token: str

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("token não pode ser vazio")


@dataclass(frozen=True, slots=True)
class Opened:
    """Conexão aberta; account_id é o número da conta pareada, se conhecido."""

    account_id: str | None = None


@dataclass(frozen=True, slots=True)
class Closed:
    """Conexão encerrada pelo transporte.

    Attributes:
        status_code: Código informado pelo cliente (401 = deslogado)
        reason: Motivo textual (ex: "logged_out", "connection_lost")
    """

    status_code: int | None = None
    reason: str = ""


@dataclass(frozen=True, slots=True)
class CredsUpdated:
    """Blob de credenciais atualizado; deve ser persistido imediatamente."""

    credentials: bytes

    def __repr__(self) -> str:
        return f"CredsUpdated(credentials=<{len(self.credentials)} bytes>)"


@dataclass(frozen=True, slots=True)
class MessageReceived:
    """Mensagem recebida, no formato bruto do binding."""

    raw: Mapping[str, Any] = field(default_factory=dict)


ClientEvent = PairingChallengeIssued | Opened | Closed | CredsUpdated | MessageReceived

EventSink = Callable[[ClientEvent], None]
