"""Contrato do protocol client (binding da rede WhatsApp).

O gateway não conhece o protocolo de rede: cada tentativa de conexão
instancia um cliente novo via factory, ligado às credenciais do tenant
e a um sink de eventos. Métodos opcionais (send_media, fetch_profile,
download_media) são detectados por getattr.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.sessions.events import EventSink


@dataclass(frozen=True, slots=True)
class SenderProfile:
    """Perfil público de um remetente."""

    display_name: str | None = None
    picture_url: str | None = None


class ProtocolClient(Protocol):
    """Operações obrigatórias de um cliente."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def logout(self) -> None: ...

    async def send_text(self, jid: str, text: str) -> str: ...


class MediaSenderClient(Protocol):
    async def send_media(
        self,
        jid: str,
        kind: str,
        data: bytes,
        filename: str,
        caption: str | None,
    ) -> str: ...


class ProfileLookupClient(Protocol):
    async def fetch_profile(self, jid: str) -> SenderProfile: ...


class MediaDownloadClient(Protocol):
    async def download_media(self, raw_message: Mapping[str, Any]) -> bytes | None: ...


class ProtocolClientFactory(Protocol):
    """Cria um cliente novo para uma tentativa de conexão."""

    def __call__(
        self,
        tenant_id: str,
        credentials: bytes,
        emit: EventSink,
    ) -> ProtocolClient: ...
