"""Helpers de extração de campos do payload bruto do binding.

Cada função lida com um bloco do payload e nunca levanta exceção:
blocos ausentes ou com tipo inesperado retornam valores vazios.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

# Wrappers que carregam a mensagem real em um campo "message" interno
_WRAPPER_KEYS = (
    "ephemeralMessage",
    "viewOnceMessage",
    "viewOnceMessageV2",
    "documentWithCaptionMessage",
)


def as_mapping(value: Any) -> Mapping[str, Any]:
    """Retorna value se for mapping, senão mapping vazio."""
    return value if isinstance(value, Mapping) else {}


def unwrap_content(content: Mapping[str, Any]) -> Mapping[str, Any]:
    """Remove wrappers (efêmera, visualização única) do bloco de conteúdo."""
    for _ in range(len(_WRAPPER_KEYS)):
        for key in _WRAPPER_KEYS:
            inner = as_mapping(as_mapping(content.get(key)).get("message"))
            if inner:
                content = inner
                break
        else:
            return content
    return content


def extract_text_content(content: Mapping[str, Any]) -> str | None:
    """Extrai texto de conversation ou extendedTextMessage."""
    conversation = content.get("conversation")
    if isinstance(conversation, str) and conversation:
        return conversation
    extended = as_mapping(content.get("extendedTextMessage")).get("text")
    if isinstance(extended, str) and extended:
        return extended
    return None


def extract_media_block(
    content: Mapping[str, Any], block_name: str
) -> tuple[str, str | None, str | None] | None:
    """Extrai (caption, filename, mimetype) de um bloco de mídia, se presente."""
    block = content.get(block_name)
    if not isinstance(block, Mapping):
        return None
    caption = block.get("caption")
    filename = block.get("fileName")
    mimetype = block.get("mimetype")
    return (
        caption.strip() if isinstance(caption, str) else "",
        filename if isinstance(filename, str) and filename else None,
        mimetype if isinstance(mimetype, str) and mimetype else None,
    )


def parse_timestamp(value: Any) -> datetime:
    """Converte messageTimestamp (segundos, int ou str) para datetime UTC."""
    if isinstance(value, Mapping):
        # Long serializado como {"low": ..., "high": ...}
        value = value.get("low")
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return datetime.now(UTC)
    if seconds <= 0:
        return datetime.now(UTC)
    return datetime.fromtimestamp(seconds, tz=UTC)
