"""Settings do gateway de sessões WhatsApp.

Parâmetros do ciclo de vida por tenant: reconexão, pareamento,
timeouts de transporte e carregamento do protocol client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Factory padrão: cliente loopback em memória (apenas development)
LOOPBACK_CLIENT_FACTORY: str = "app.infra.whatsapp.loopback_client:create_loopback_client"


@dataclass(frozen=True)
class GatewaySettings:
    """Configurações do gateway multi-tenant.

    Attributes:
        max_reconnect_attempts: Orçamento de reconexões antes de FAILED
        reconnect_base_delay_seconds: Delay base do backoff exponencial
        reconnect_max_delay_seconds: Teto do backoff
        pairing_challenge_ttl_seconds: Validade do QR antes de renovar
        connect_timeout_seconds: Timeout da chamada connect do cliente
        close_timeout_seconds: Timeout de close/logout do cliente
        send_timeout_seconds: Timeout de envio de mensagem
        protocol_client_factory: Caminho "modulo:atributo" da factory de clientes
        restore_on_startup: Reconecta tenants com credenciais ao subir
        api_token: Token exigido no header X-API-Key (vazio = desabilitado)
        media_upload_dir: Diretório de mídias recebidas
        media_url_prefix: Prefixo da URL relativa das mídias salvas
        media_send_dir: Único diretório de onde send_media lê arquivos
    """

    # Reconexão
    max_reconnect_attempts: int = 5
    reconnect_base_delay_seconds: float = 5.0
    reconnect_max_delay_seconds: float = 60.0

    # Pareamento
    pairing_challenge_ttl_seconds: float = 60.0

    # Timeouts de transporte
    connect_timeout_seconds: float = 30.0
    close_timeout_seconds: float = 10.0
    send_timeout_seconds: float = 30.0

    # Protocol client
    protocol_client_factory: str = LOOPBACK_CLIENT_FACTORY

    restore_on_startup: bool = False
    api_token: str = ""

    # Mídia recebida
    media_upload_dir: str = "static/uploads/whatsapp"
    media_url_prefix: str = "/static/uploads/whatsapp"

    # Mídia enviada
    media_send_dir: str = "static/uploads/outbound"

    @property
    def uses_loopback_client(self) -> bool:
        """Retorna True se a factory configurada é o cliente loopback."""
        return self.protocol_client_factory == LOOPBACK_CLIENT_FACTORY

    def validate(self, *, is_development: bool = True) -> list[str]:
        """Valida configurações do gateway.

        Args:
            is_development: Ambiente atual é development.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.max_reconnect_attempts < 0:
            errors.append("GATEWAY_MAX_RECONNECT_ATTEMPTS deve ser >= 0")

        if self.reconnect_base_delay_seconds <= 0:
            errors.append("GATEWAY_RECONNECT_BASE_DELAY_SECONDS deve ser > 0")

        if self.reconnect_max_delay_seconds < self.reconnect_base_delay_seconds:
            errors.append(
                "GATEWAY_RECONNECT_MAX_DELAY_SECONDS deve ser >= "
                "GATEWAY_RECONNECT_BASE_DELAY_SECONDS"
            )

        if self.pairing_challenge_ttl_seconds <= 0:
            errors.append("GATEWAY_PAIRING_TTL_SECONDS deve ser > 0")

        for name, value in (
            ("GATEWAY_CONNECT_TIMEOUT_SECONDS", self.connect_timeout_seconds),
            ("GATEWAY_CLOSE_TIMEOUT_SECONDS", self.close_timeout_seconds),
            ("GATEWAY_SEND_TIMEOUT_SECONDS", self.send_timeout_seconds),
        ):
            if value <= 0:
                errors.append(f"{name} deve ser > 0")

        if ":" not in self.protocol_client_factory:
            errors.append("PROTOCOL_CLIENT_FACTORY deve ter formato 'modulo:atributo'")

        if self.uses_loopback_client and not is_development:
            errors.append(
                "PROTOCOL_CLIENT_FACTORY loopback proibido em staging/production"
            )

        if not self.media_send_dir:
            errors.append("MEDIA_SEND_DIR não pode ser vazio")

        if not is_development and not self.api_token:
            errors.append("GATEWAY_API_TOKEN não configurado")

        return errors


def _load_from_env() -> GatewaySettings:
    """Carrega GatewaySettings a partir de variáveis de ambiente."""
    return GatewaySettings(
        max_reconnect_attempts=int(os.getenv("GATEWAY_MAX_RECONNECT_ATTEMPTS", "5")),
        reconnect_base_delay_seconds=float(
            os.getenv("GATEWAY_RECONNECT_BASE_DELAY_SECONDS", "5")
        ),
        reconnect_max_delay_seconds=float(
            os.getenv("GATEWAY_RECONNECT_MAX_DELAY_SECONDS", "60")
        ),
        pairing_challenge_ttl_seconds=float(
            os.getenv("GATEWAY_PAIRING_TTL_SECONDS", "60")
        ),
        connect_timeout_seconds=float(
            os.getenv("GATEWAY_CONNECT_TIMEOUT_SECONDS", "30")
        ),
        close_timeout_seconds=float(os.getenv("GATEWAY_CLOSE_TIMEOUT_SECONDS", "10")),
        send_timeout_seconds=float(os.getenv("GATEWAY_SEND_TIMEOUT_SECONDS", "30")),
        protocol_client_factory=os.getenv(
            "PROTOCOL_CLIENT_FACTORY", LOOPBACK_CLIENT_FACTORY
        ),
        restore_on_startup=os.getenv("GATEWAY_RESTORE_ON_STARTUP", "").lower()
        in ("true", "1", "yes"),
        api_token=os.getenv("GATEWAY_API_TOKEN", ""),
        media_upload_dir=os.getenv("MEDIA_UPLOAD_DIR", "static/uploads/whatsapp"),
        media_url_prefix=os.getenv("MEDIA_URL_PREFIX", "/static/uploads/whatsapp"),
        media_send_dir=os.getenv("MEDIA_SEND_DIR", "static/uploads/outbound"),
    )


@lru_cache(maxsize=1)
def get_gateway_settings() -> GatewaySettings:
    """Retorna instância cacheada de GatewaySettings."""
    return _load_from_env()
