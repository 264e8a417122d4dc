"""Settings do relay de webhooks para o consumidor downstream."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações de entrega de webhooks.

    Attributes:
        base_url: URL base do consumidor (vazia = relay desabilitado)
        message_path: Path do webhook de mensagens recebidas
        status_path: Path do webhook de mudança de status
        message_timeout_seconds: Timeout de entrega de mensagens
        status_timeout_seconds: Timeout de entrega de status
        token: Valor do header X-Webhook-Token (vazio = não envia)
        max_concurrency: Entregas simultâneas em background
    """

    base_url: str = ""
    message_path: str = "/webhook/whatsapp"
    status_path: str = "/api/whatsapp/webhook/status"
    message_timeout_seconds: float = 10.0
    status_timeout_seconds: float = 5.0
    token: str = ""
    max_concurrency: int = 100

    @property
    def enabled(self) -> bool:
        """Retorna True se há consumidor configurado."""
        return bool(self.base_url)

    @property
    def message_url(self) -> str:
        """URL completa do webhook de mensagens."""
        return f"{self.base_url.rstrip('/')}{self.message_path}"

    @property
    def status_url(self) -> str:
        """URL completa do webhook de status."""
        return f"{self.base_url.rstrip('/')}{self.status_path}"

    def validate(self) -> list[str]:
        """Valida configurações de webhook.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.base_url and not self.base_url.startswith(("http://", "https://")):
            errors.append("DOWNSTREAM_BASE_URL deve começar com http:// ou https://")

        if self.message_timeout_seconds <= 0:
            errors.append("WEBHOOK_MESSAGE_TIMEOUT_SECONDS deve ser > 0")

        if self.status_timeout_seconds <= 0:
            errors.append("WEBHOOK_STATUS_TIMEOUT_SECONDS deve ser > 0")

        if self.max_concurrency < 1:
            errors.append("WEBHOOK_MAX_CONCURRENCY deve ser >= 1")

        return errors


def _resolve_base_url() -> str:
    """Em produção prefere DOWNSTREAM_BASE_URL_PRODUCTION quando definido."""
    environment = os.getenv("ENVIRONMENT", "").lower()
    if environment in ("production", "prod"):
        production_url = os.getenv("DOWNSTREAM_BASE_URL_PRODUCTION", "")
        if production_url:
            return production_url
    return os.getenv("DOWNSTREAM_BASE_URL", "")


def _load_from_env() -> WebhookSettings:
    """Carrega WebhookSettings a partir de variáveis de ambiente."""
    return WebhookSettings(
        base_url=_resolve_base_url(),
        message_path=os.getenv("WEBHOOK_MESSAGE_PATH", "/webhook/whatsapp"),
        status_path=os.getenv("WEBHOOK_STATUS_PATH", "/api/whatsapp/webhook/status"),
        message_timeout_seconds=float(
            os.getenv("WEBHOOK_MESSAGE_TIMEOUT_SECONDS", "10")
        ),
        status_timeout_seconds=float(os.getenv("WEBHOOK_STATUS_TIMEOUT_SECONDS", "5")),
        token=os.getenv("WEBHOOK_TOKEN", ""),
        max_concurrency=int(os.getenv("WEBHOOK_MAX_CONCURRENCY", "100")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_from_env()
