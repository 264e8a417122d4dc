"""Extrator de mensagens recebidas pelo binding WhatsApp Web.

Responsabilidades:
- Validar a estrutura mínima do payload bruto (key.remoteJid)
- Identificar o tipo de conteúdo (texto, imagem, áudio, vídeo, documento)
- Aplicar placeholders para mídia sem legenda

Não aplica política de remetente - apenas extração estrutural.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.sessions.models import InboundMessage, MessageKind

from ._extraction_helpers import (
    as_mapping,
    extract_media_block,
    extract_text_content,
    parse_timestamp,
    unwrap_content,
)

logger = logging.getLogger(__name__)

MEDIA_BLOCKS: tuple[tuple[str, MessageKind], ...] = (
    ("imageMessage", MessageKind.IMAGE),
    ("audioMessage", MessageKind.AUDIO),
    ("videoMessage", MessageKind.VIDEO),
    ("documentMessage", MessageKind.DOCUMENT),
)

PLACEHOLDERS: dict[MessageKind, str] = {
    MessageKind.IMAGE: "[IMAGEM]",
    MessageKind.AUDIO: "[ÁUDIO]",
    MessageKind.VIDEO: "[VÍDEO]",
    MessageKind.DOCUMENT: "[DOCUMENTO]",
    MessageKind.UNSUPPORTED: "[MENSAGEM NÃO SUPORTADA]",
}


def jid_to_address(jid: str) -> str:
    """Extrai a parte de usuário do jid (ex: 5511...@s.whatsapp.net -> 5511...)."""
    user = jid.split("@", 1)[0]
    # Jids de múltiplos dispositivos: 5511...:12@s.whatsapp.net
    return user.split(":", 1)[0]


def extract_inbound_message(raw: Mapping[str, Any]) -> InboundMessage:
    """Converte o payload bruto do binding em InboundMessage.

    Args:
        raw: Mensagem no formato do binding (key, message, pushName, messageTimestamp)

    Returns:
        InboundMessage com texto/placeholder e tipo identificados

    Raises:
        ValueError: Se o payload não tiver estrutura mínima
    """
    if not isinstance(raw, Mapping):
        raise ValueError("payload de mensagem deve ser um objeto")

    key = raw.get("key")
    if not isinstance(key, Mapping):
        raise ValueError("payload sem bloco key")

    remote_jid = key.get("remoteJid")
    if not isinstance(remote_jid, str) or not remote_jid:
        raise ValueError("payload sem key.remoteJid")

    content = unwrap_content(as_mapping(raw.get("message")))
    kind, text, filename, mimetype = _classify_content(content)

    push_name = raw.get("pushName")
    message_id = key.get("id")

    return InboundMessage(
        remote_jid=remote_jid,
        sender_address=jid_to_address(remote_jid),
        from_me=bool(key.get("fromMe")),
        kind=kind,
        text=text,
        push_name=push_name if isinstance(push_name, str) and push_name else None,
        message_id=message_id if isinstance(message_id, str) and message_id else None,
        media_filename=filename,
        media_mimetype=mimetype,
        timestamp=parse_timestamp(raw.get("messageTimestamp")),
        raw=dict(raw),
    )


def _classify_content(
    content: Mapping[str, Any],
) -> tuple[MessageKind, str, str | None, str | None]:
    text = extract_text_content(content)
    if text is not None:
        return MessageKind.TEXT, text, None, None

    for block_name, kind in MEDIA_BLOCKS:
        media = extract_media_block(content, block_name)
        if media is None:
            continue
        caption, filename, mimetype = media
        return kind, caption or PLACEHOLDERS[kind], filename, mimetype

    if content:
        logger.info(
            "unsupported_message_type_received",
            extra={"content_keys": sorted(content)[:5]},
        )
    return MessageKind.UNSUPPORTED, PLACEHOLDERS[MessageKind.UNSUPPORTED], None, None
