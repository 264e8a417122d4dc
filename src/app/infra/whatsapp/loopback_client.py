"""Protocol client em memória para desenvolvimento local.

Não fala com a rede WhatsApp: simula pareamento (QR seguido de
abertura automática), aceita envios e expõe helpers para injetar
mensagens recebidas e quedas de conexão. Proibido fora de development
(ver GatewaySettings.validate).
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.sessions.events import (
    Closed,
    CredsUpdated,
    EventSink,
    MessageReceived,
    Opened,
    PairingChallengeIssued,
)

logger = logging.getLogger(__name__)

DEFAULT_AUTO_PAIR_SECONDS = 2.0
LOOPBACK_ACCOUNT_ID = "5500000000000"


@dataclass(slots=True)
class SentMessage:
    jid: str
    kind: str
    text: str | None = None
    filename: str | None = None
    size_bytes: int = 0
    message_id: str = field(default_factory=lambda: uuid.uuid4().hex.upper())


class LoopbackClient:
    """Cliente simulado, um por tentativa de conexão.

    Args:
        tenant_id: Tenant dono do cliente
        credentials: Blob salvo (vazio = nunca pareado)
        emit: Sink de eventos da sessão
        auto_pair_seconds: Delay até simular a leitura do QR (None desativa)
    """

    def __init__(
        self,
        tenant_id: str,
        credentials: bytes,
        emit: EventSink,
        *,
        auto_pair_seconds: float | None = DEFAULT_AUTO_PAIR_SECONDS,
    ) -> None:
        self.tenant_id = tenant_id
        self._credentials = credentials
        self._emit = emit
        self._auto_pair_seconds = auto_pair_seconds
        self._pair_task: asyncio.Task[None] | None = None
        self.sent: list[SentMessage] = []
        self.closed = False
        self.logged_out = False

    async def connect(self) -> None:
        if self._credentials:
            self._emit(Opened(account_id=LOOPBACK_ACCOUNT_ID))
            return

        token = f"loopback-{secrets.token_hex(8)}"
        self._emit(PairingChallengeIssued(token=token))
        logger.info(
            "loopback_pairing_challenge_issued",
            extra={"tenant_id": self.tenant_id},
        )
        if self._auto_pair_seconds is not None:
            self._pair_task = asyncio.create_task(
                self._auto_pair(self._auto_pair_seconds),
                name=f"loopback_pair:{self.tenant_id}",
            )

    async def _auto_pair(self, delay_seconds: float) -> None:
        await asyncio.sleep(delay_seconds)
        if self.closed:
            return
        self._credentials = f"loopback:{self.tenant_id}".encode()
        self._emit(CredsUpdated(credentials=self._credentials))
        self._emit(Opened(account_id=LOOPBACK_ACCOUNT_ID))

    async def close(self) -> None:
        self.closed = True
        if self._pair_task is not None and not self._pair_task.done():
            self._pair_task.cancel()

    async def logout(self) -> None:
        self.logged_out = True

    async def send_text(self, jid: str, text: str) -> str:
        self._ensure_open()
        message = SentMessage(jid=jid, kind="text", text=text)
        self.sent.append(message)
        return message.message_id

    async def send_media(
        self,
        jid: str,
        kind: str,
        data: bytes,
        filename: str,
        caption: str | None,
    ) -> str:
        self._ensure_open()
        message = SentMessage(
            jid=jid, kind=kind, text=caption, filename=filename, size_bytes=len(data)
        )
        self.sent.append(message)
        return message.message_id

    def _ensure_open(self) -> None:
        if self.closed:
            raise ConnectionError("loopback client fechado")

    # Helpers de simulação

    def simulate_inbound(self, raw: Mapping[str, Any]) -> None:
        """Injeta uma mensagem recebida no formato bruto do binding."""
        self._emit(MessageReceived(raw=raw))

    def simulate_drop(self, status_code: int | None = None, reason: str = "connection_lost") -> None:
        """Injeta uma queda de conexão (401 simula logout remoto)."""
        self._emit(Closed(status_code=status_code, reason=reason))


def create_loopback_client(
    tenant_id: str,
    credentials: bytes,
    emit: EventSink,
) -> LoopbackClient:
    """Factory no formato esperado por PROTOCOL_CLIENT_FACTORY."""
    return LoopbackClient(tenant_id, credentials, emit)
