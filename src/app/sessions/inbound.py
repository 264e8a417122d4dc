"""Pipeline de mensagens recebidas: extração, filtragem, enriquecimento.

Extração e filtragem rodam na ordem de chegada, dentro da task de
bombeamento da sessão. Enriquecimento, download de mídia e despacho
rodam em tasks de background, para que eventos de estado enfileirados
atrás de uma rajada de mensagens nunca esperem por I/O.

Nenhuma falha deste pipeline é propagada: mensagens inválidas ou
fora da política são descartadas com log, e falhas de enriquecimento
apenas deixam os campos opcionais vazios.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from api.normalizers.whatsapp import extract_inbound_message
from api.validators.whatsapp import is_address_allowed, is_sender_allowed
from app.infra.webhook import BackgroundTaskTracker
from app.sessions.models import InboundMessage, MessageKind, MessageWebhookEvent
from config.logging import log_fallback, mask_address

if TYPE_CHECKING:
    from app.infra.webhook import WebhookRelay
    from app.infra.whatsapp.media_store import MediaStore
    from app.protocols.protocol_client import ProtocolClient, SenderProfile
    from config.settings import AddressPolicySettings

logger = logging.getLogger(__name__)

PROFILE_LOOKUP_TIMEOUT_SECONDS = 5.0
MEDIA_DOWNLOAD_TIMEOUT_SECONDS = 30.0
MAX_CONCURRENT_ENRICHMENTS = 50


class InboundProcessor:
    """Transforma payloads brutos em eventos de webhook de mensagem.

    Args:
        relay: WebhookRelay para entrega fire-and-forget
        media_store: Armazenamento de mídias recebidas
        policy: Política de remetentes
        max_concurrency: Limite de enriquecimentos simultâneos
    """

    def __init__(
        self,
        relay: WebhookRelay,
        media_store: MediaStore,
        policy: AddressPolicySettings,
        max_concurrency: int = MAX_CONCURRENT_ENRICHMENTS,
    ) -> None:
        self._relay = relay
        self._media_store = media_store
        self._policy = policy
        self._tasks = BackgroundTaskTracker(max_concurrency, name="inbound_enrichment")

    @property
    def pending_count(self) -> int:
        return self._tasks.active_count

    def drop_reason(self, message: InboundMessage) -> str | None:
        """Motivo de descarte, ou None se a mensagem deve ser entregue."""
        if message.from_me:
            return "from_me"
        if message.is_group:
            return "group"
        if message.is_broadcast:
            return "broadcast"
        if not is_address_allowed(message.sender_address, self._policy):
            return "address_policy"
        if not is_sender_allowed(message.sender_address, self._policy):
            return "sender_not_allowed"
        return None

    def accept(self, tenant_id: str, raw: Mapping[str, Any]) -> InboundMessage | None:
        """Extrai e filtra; retorna a mensagem aceita ou None."""
        try:
            message = extract_inbound_message(raw)
        except ValueError as exc:
            logger.warning(
                "inbound_message_malformed",
                extra={"tenant_id": tenant_id, "error": str(exc)},
            )
            return None

        reason = self.drop_reason(message)
        if reason is not None:
            logger.debug(
                "inbound_message_dropped",
                extra={
                    "tenant_id": tenant_id,
                    "reason": reason,
                    "sender": mask_address(message.remote_jid),
                },
            )
            return None
        return message

    def submit(
        self,
        tenant_id: str,
        client: ProtocolClient | None,
        raw: Mapping[str, Any],
    ) -> InboundMessage | None:
        """Aceita a mensagem agora e agenda enriquecimento e despacho.

        Returns:
            Mensagem aceita (ainda não entregue), ou None se descartada
        """
        message = self.accept(tenant_id, raw)
        if message is None:
            return None
        self._tasks.schedule(self.relay_message(tenant_id, client, message), tenant_id=tenant_id)
        return message

    async def relay_message(
        self,
        tenant_id: str,
        client: ProtocolClient | None,
        message: InboundMessage,
    ) -> MessageWebhookEvent:
        """Enriquece a mensagem aceita e a entrega ao relay."""
        profile = await self._lookup_profile(tenant_id, client, message)
        media_ref = await self._store_media(tenant_id, client, message)

        event = MessageWebhookEvent(
            tenant_id=tenant_id,
            sender_address=message.sender_address,
            text=message.text,
            message_kind=message.kind,
            media_ref=media_ref,
            media_filename=_media_filename(message),
            sender_profile_name=(profile.display_name if profile else None)
            or message.push_name,
            sender_profile_picture=profile.picture_url if profile else None,
            message_id=message.message_id,
            timestamp=message.timestamp,
        )
        logger.info(
            "inbound_message_relayed",
            extra={
                "tenant_id": tenant_id,
                "message_kind": message.kind.value,
                "sender": mask_address(message.sender_address),
                "has_media": media_ref is not None,
            },
        )
        self._relay.dispatch(event)
        return event

    async def join(self) -> None:
        """Aguarda os enriquecimentos em andamento terminarem."""
        await self._tasks.join()

    async def drain(self, timeout_seconds: float = 10.0) -> None:
        """Aguarda enriquecimentos pendentes até o timeout (shutdown)."""
        await self._tasks.drain(timeout_seconds)

    async def _lookup_profile(
        self,
        tenant_id: str,
        client: ProtocolClient | None,
        message: InboundMessage,
    ) -> SenderProfile | None:
        fetch_profile = getattr(client, "fetch_profile", None)
        if fetch_profile is None:
            return None
        try:
            return await asyncio.wait_for(
                fetch_profile(message.remote_jid), PROFILE_LOOKUP_TIMEOUT_SECONDS
            )
        except Exception as exc:
            log_fallback(logger, "profile_lookup", type(exc).__name__, tenant_id)
            return None

    async def _store_media(
        self,
        tenant_id: str,
        client: ProtocolClient | None,
        message: InboundMessage,
    ) -> str | None:
        if not message.kind.is_media:
            return None
        download_media = getattr(client, "download_media", None)
        if download_media is None:
            return None
        try:
            data = await asyncio.wait_for(
                download_media(message.raw), MEDIA_DOWNLOAD_TIMEOUT_SECONDS
            )
            if not data:
                logger.info(
                    "media_download_empty",
                    extra={"tenant_id": tenant_id, "kind": message.kind.value},
                )
                return None
            return await self._media_store.save(message.kind, data, message.media_filename)
        except Exception as exc:
            logger.warning(
                "media_store_failed",
                extra={
                    "tenant_id": tenant_id,
                    "kind": message.kind.value,
                    "error_type": type(exc).__name__,
                },
            )
            return None


def _media_filename(message: InboundMessage) -> str | None:
    if message.kind != MessageKind.DOCUMENT:
        return None
    return message.media_filename or f"document_{int(time.time() * 1000)}"
