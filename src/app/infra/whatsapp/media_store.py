"""Armazenamento local de mídias recebidas.

Layout:
    <upload_dir>/{images,audios,videos,documents}/<kind>_<timestamp>_<random><ext>

Retorna a URL relativa usada pelo consumidor para buscar o arquivo.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from app.sessions.models import MessageKind

logger = logging.getLogger(__name__)

KIND_DIRECTORIES: dict[MessageKind, str] = {
    MessageKind.IMAGE: "images",
    MessageKind.AUDIO: "audios",
    MessageKind.VIDEO: "videos",
    MessageKind.DOCUMENT: "documents",
}

DEFAULT_EXTENSIONS: dict[MessageKind, str] = {
    MessageKind.IMAGE: ".jpg",
    MessageKind.AUDIO: ".ogg",
    MessageKind.VIDEO: ".mp4",
    MessageKind.DOCUMENT: ".bin",
}

DEFAULT_MAX_SIZE_BYTES = 100 * 1024 * 1024


class MediaStore:
    """Grava bytes de mídia em disco e gera referência relativa.

    Args:
        upload_dir: Diretório raiz das mídias
        url_prefix: Prefixo da URL relativa retornada
        max_size_bytes: Tamanho máximo aceito
    """

    def __init__(
        self,
        upload_dir: str | Path,
        url_prefix: str = "/static/uploads/whatsapp",
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
    ) -> None:
        self._upload_dir = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._max_size_bytes = max_size_bytes

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def build_filename(self, kind: MessageKind, original_filename: str | None = None) -> str:
        """Gera nome único: <kind>_<timestamp_ms>_<random><ext>."""
        extension = DEFAULT_EXTENSIONS[kind]
        if kind == MessageKind.DOCUMENT and original_filename:
            suffix = PurePosixPath(original_filename).suffix
            if suffix and len(suffix) <= 10:
                extension = suffix.lower()
        return f"{kind.value}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}{extension}"

    async def save(
        self,
        kind: MessageKind,
        data: bytes,
        original_filename: str | None = None,
    ) -> str:
        """Grava a mídia e retorna a URL relativa.

        Raises:
            ValueError: Se kind não é mídia, bytes vazios ou acima do limite
            OSError: Falha de escrita em disco
        """
        if kind not in KIND_DIRECTORIES:
            raise ValueError(f"Tipo sem armazenamento de mídia: {kind}")
        if not data:
            raise ValueError("Mídia vazia")
        if len(data) > self._max_size_bytes:
            raise ValueError(f"Mídia excede {self._max_size_bytes} bytes")

        directory_name = KIND_DIRECTORIES[kind]
        filename = self.build_filename(kind, original_filename)
        target = self._upload_dir / directory_name / filename
        await asyncio.to_thread(_write_file, target, data)

        logger.info(
            "media_saved",
            extra={"kind": kind.value, "size": len(data), "media_file": filename},
        )
        return f"{self._url_prefix}/{directory_name}/{filename}"


def _write_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
