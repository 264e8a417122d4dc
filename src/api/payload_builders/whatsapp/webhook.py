"""Builders dos payloads de webhook entregues ao consumidor downstream.

Campos em snake_case; opcionais ausentes são enviados como null
para que o consumidor tenha um schema estável.
"""

from __future__ import annotations

from typing import Any

from app.sessions.models import MessageWebhookEvent, StatusWebhookEvent, WebhookEvent


def build_message_payload(event: MessageWebhookEvent) -> dict[str, Any]:
    """Constrói payload de mensagem recebida."""
    return {
        "tenant_id": event.tenant_id,
        "sender_address": event.sender_address,
        "text": event.text,
        "message_kind": event.message_kind.value,
        "media_ref": event.media_ref,
        "media_filename": event.media_filename,
        "sender_profile_name": event.sender_profile_name,
        "sender_profile_picture": event.sender_profile_picture,
        "message_id": event.message_id,
        "timestamp": event.timestamp.isoformat(),
    }


def build_status_payload(event: StatusWebhookEvent) -> dict[str, Any]:
    """Constrói payload de mudança de status."""
    return {
        "tenant_id": event.tenant_id,
        "status": event.status.value,
        "pairing_challenge": event.pairing_challenge,
        "reconnect_attempts": event.reconnect_attempts,
        "reason": event.reason,
        "timestamp": event.timestamp.isoformat(),
    }


def build_webhook_payload(event: WebhookEvent) -> dict[str, Any]:
    """Despacha para o builder do tipo do evento.

    Raises:
        TypeError: Se o evento não for de um tipo conhecido
    """
    if isinstance(event, MessageWebhookEvent):
        return build_message_payload(event)
    if isinstance(event, StatusWebhookEvent):
        return build_status_payload(event)
    raise TypeError(f"Evento de webhook desconhecido: {type(event).__name__}")
