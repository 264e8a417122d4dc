"""Módulo de sessões por tenant.

Exporta modelos e eventos do protocol client. A sessão e o registry
ficam nos submódulos (importam validators/normalizers, que dependem
dos modelos daqui):

    from app.sessions.registry import TenantRegistry
    from app.sessions.tenant_session import TenantSession
"""

from app.sessions.events import (
    ClientEvent,
    Closed,
    CredsUpdated,
    EventSink,
    MessageReceived,
    Opened,
    PairingChallengeIssued,
)
from app.sessions.models import (
    ConnectOutcome,
    InboundMessage,
    MessageKind,
    MessageWebhookEvent,
    PairingChallenge,
    SendResult,
    StatusKind,
    StatusWebhookEvent,
    TenantStatus,
)

__all__ = [
    "ClientEvent",
    "Closed",
    "ConnectOutcome",
    "CredsUpdated",
    "EventSink",
    "InboundMessage",
    "MessageKind",
    "MessageReceived",
    "MessageWebhookEvent",
    "Opened",
    "PairingChallenge",
    "PairingChallengeIssued",
    "SendResult",
    "StatusKind",
    "StatusWebhookEvent",
    "TenantStatus",
]
