"""Builders de payload de webhook do gateway WhatsApp."""

from api.payload_builders.whatsapp.webhook import (
    build_message_payload,
    build_status_payload,
    build_webhook_payload,
)

__all__ = [
    "build_message_payload",
    "build_status_payload",
    "build_webhook_payload",
]
