"""Entrega de webhooks ao consumidor downstream."""

from app.infra.webhook.relay import WEBHOOK_TOKEN_HEADER, WebhookRelay
from app.infra.webhook.tasks import BackgroundTaskTracker

__all__ = [
    "WEBHOOK_TOKEN_HEADER",
    "BackgroundTaskTracker",
    "WebhookRelay",
]
