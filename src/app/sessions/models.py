"""Modelos de valor do gateway de sessões.

Estruturas imutáveis trocadas entre TenantSession, registry,
pipeline de entrada e camada HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any

from fsm.states import ConnectionState


class ConnectOutcome(StrEnum):
    """Resultado de connect()."""

    ACCEPTED = "accepted"
    ALREADY_CONNECTED = "already_connected"
    IN_PROGRESS = "in_progress"


class MessageKind(StrEnum):
    """Tipo de conteúdo de uma mensagem recebida."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    UNSUPPORTED = "unsupported"

    @property
    def is_media(self) -> bool:
        return self in MEDIA_KINDS


MEDIA_KINDS: frozenset[MessageKind] = frozenset({
    MessageKind.IMAGE,
    MessageKind.AUDIO,
    MessageKind.VIDEO,
    MessageKind.DOCUMENT,
})


class StatusKind(StrEnum):
    """Status publicado no webhook de status."""

    AWAITING_PAIRING = "awaiting_pairing"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    LOGGED_OUT = "logged_out"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PairingChallenge:
    """QR de pareamento vigente.

    Attributes:
        token: Conteúdo do QR (opaco)
        issued_at: Momento de emissão (UTC)
        expires_at: Momento em que o gateway renova a tentativa
    """

    token: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def issue(cls, token: str, ttl_seconds: float) -> PairingChallenge:
        """Cria challenge emitido agora com validade ttl_seconds."""
        now = datetime.now(UTC)
        return cls(token=token, issued_at=now, expires_at=now + timedelta(seconds=ttl_seconds))

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class TenantStatus:
    """Snapshot do estado de um tenant (seguro para resposta HTTP)."""

    tenant_id: str
    state: ConnectionState
    has_pairing_challenge: bool
    reconnect_attempts: int
    last_error: str | None = None
    account_id: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    recent_transitions: tuple[dict[str, Any], ...] = ()

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def is_connecting(self) -> bool:
        return self.state in (
            ConnectionState.CONNECTING,
            ConnectionState.AWAITING_PAIRING,
            ConnectionState.CLOSING,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializa snapshot para resposta HTTP."""
        return {
            "tenant_id": self.tenant_id,
            "state": self.state.value,
            "connected": self.connected,
            "has_pairing_challenge": self.has_pairing_challenge,
            "reconnect_attempts": self.reconnect_attempts,
            "is_connecting": self.is_connecting,
            "last_error": self.last_error,
            "account_id": self.account_id,
            "updated_at": self.updated_at.isoformat(),
            "recent_transitions": list(self.recent_transitions),
        }


@dataclass(frozen=True, slots=True)
class SendResult:
    """Resultado de um envio aceito pelo transporte."""

    success: bool
    message_id: str | None = None


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """Mensagem recebida normalizada, antes da filtragem.

    Attributes:
        remote_jid: Endereço de origem na rede (ex: 5511...@s.whatsapp.net)
        sender_address: Apenas os dígitos do remetente
        from_me: Mensagem originada pela própria conta
        kind: Tipo de conteúdo
        text: Texto ou legenda (vazio para mídia sem legenda)
        push_name: Nome exibido enviado junto da mensagem
        message_id: Identificador da mensagem na rede
        media_filename: Nome do arquivo informado (documentos)
        media_mimetype: Mimetype informado pela rede
        timestamp: Momento da mensagem (UTC)
        raw: Payload bruto do binding (necessário para download de mídia)
    """

    remote_jid: str
    sender_address: str
    from_me: bool
    kind: MessageKind
    text: str = ""
    push_name: str | None = None
    message_id: str | None = None
    media_filename: str | None = None
    media_mimetype: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_group(self) -> bool:
        return self.remote_jid.endswith("@g.us")

    @property
    def is_broadcast(self) -> bool:
        return self.remote_jid.endswith("@broadcast")


@dataclass(frozen=True, slots=True)
class MessageWebhookEvent:
    """Mensagem canônica entregue ao consumidor downstream."""

    tenant_id: str
    sender_address: str
    text: str
    message_kind: MessageKind
    media_ref: str | None = None
    media_filename: str | None = None
    sender_profile_name: str | None = None
    sender_profile_picture: str | None = None
    message_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class StatusWebhookEvent:
    """Mudança de status entregue ao consumidor downstream."""

    tenant_id: str
    status: StatusKind
    reconnect_attempts: int = 0
    pairing_challenge: str | None = None
    reason: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


WebhookEvent = MessageWebhookEvent | StatusWebhookEvent
