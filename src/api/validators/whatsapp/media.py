"""Validação de envios de mídia."""

from __future__ import annotations

from pathlib import Path

from app.sessions.models import MEDIA_KINDS, MessageKind
from utils.errors import InvalidMediaError

# Limite do WhatsApp para documentos
MAX_MEDIA_SIZE_BYTES = 100 * 1024 * 1024


def validate_media_kind(media_kind: str) -> MessageKind:
    """Converte media_kind em MessageKind de mídia.

    Raises:
        InvalidMediaError: Se o tipo não é image|audio|video|document
    """
    try:
        kind = MessageKind(media_kind.lower())
    except ValueError:
        kind = None
    if kind not in MEDIA_KINDS:
        raise InvalidMediaError(f"Tipo de mídia não suportado: {media_kind}")
    return kind


def validate_media_file(file_path: str, base_dir: str | Path) -> Path:
    """Resolve o arquivo dentro de base_dir e verifica tamanho.

    Caminhos relativos são resolvidos a partir de base_dir. Links
    simbólicos e `..` são seguidos antes da checagem de contenção.

    Raises:
        InvalidMediaError: Se o arquivo não puder ser enviado
    """
    if not file_path:
        raise InvalidMediaError("file_path é obrigatório")
    root = Path(base_dir).resolve()
    path = (root / file_path).resolve()
    if not path.is_relative_to(root):
        raise InvalidMediaError("file_path fora do diretório de envio de mídia")
    if not path.is_file():
        raise InvalidMediaError(f"Arquivo não encontrado: {path.name}")
    if path.stat().st_size > MAX_MEDIA_SIZE_BYTES:
        raise InvalidMediaError(f"Arquivo excede {MAX_MEDIA_SIZE_BYTES} bytes")
    return path
