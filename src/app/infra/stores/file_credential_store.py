"""File Credential Store — um diretório por tenant em disco.

Layout:
    <base_dir>/tenant_<tenant_id>/creds.bin
    <base_dir>/tenant_<tenant_id>/.gitignore

Escrita atômica (arquivo temporário + os.replace) com permissão 0600.
I/O de disco roda em thread para não bloquear o event loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

from app.protocols.credential_store import CredentialStoreProtocol
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)

TENANT_DIR_PREFIX = "tenant_"
CREDENTIALS_FILENAME = "creds.bin"
_GITIGNORE_CONTENT = "*\n"


class FileCredentialStore(CredentialStoreProtocol):
    """Store de credenciais em sistema de arquivos.

    Args:
        base_dir: Diretório raiz (criado sob demanda)
    """

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def tenant_dir(self, tenant_id: str) -> Path:
        """Diretório de credenciais do tenant."""
        return self._base_dir / f"{TENANT_DIR_PREFIX}{tenant_id}"

    def _creds_path(self, tenant_id: str) -> Path:
        return self.tenant_dir(tenant_id) / CREDENTIALS_FILENAME

    def _ensure_tenant_dir(self, tenant_id: str) -> Path:
        directory = self.tenant_dir(tenant_id)
        directory.mkdir(parents=True, exist_ok=True, mode=0o700)
        gitignore = directory / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(_GITIGNORE_CONTENT, encoding="utf-8")
        return directory

    def _load_sync(self, tenant_id: str) -> bytes | None:
        path = self._creds_path(tenant_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _save_sync(self, tenant_id: str, credentials: bytes) -> None:
        directory = self._ensure_tenant_dir(tenant_id)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".creds-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(credentials)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._creds_path(tenant_id))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _delete_sync(self, tenant_id: str) -> bool:
        directory = self.tenant_dir(tenant_id)
        if not directory.exists():
            return False
        existed = self._creds_path(tenant_id).exists()
        shutil.rmtree(directory)
        return existed

    def _list_sync(self) -> list[str]:
        if not self._base_dir.is_dir():
            return []
        return sorted(
            entry.name[len(TENANT_DIR_PREFIX):]
            for entry in self._base_dir.iterdir()
            if entry.is_dir()
            and entry.name.startswith(TENANT_DIR_PREFIX)
            and (entry / CREDENTIALS_FILENAME).is_file()
        )

    async def load_async(self, tenant_id: str) -> bytes | None:
        """Carrega blob do disco (None se ausente)."""
        try:
            return await asyncio.to_thread(self._load_sync, tenant_id)
        except OSError as exc:
            raise PersistenceError(
                f"Falha ao ler credenciais: {exc}", tenant_id=tenant_id
            ) from exc

    async def save_async(self, tenant_id: str, credentials: bytes) -> None:
        """Grava blob de forma atômica."""
        try:
            await asyncio.to_thread(self._save_sync, tenant_id, credentials)
        except OSError as exc:
            raise PersistenceError(
                f"Falha ao gravar credenciais: {exc}", tenant_id=tenant_id
            ) from exc
        logger.debug(
            "credentials_saved",
            extra={"tenant_id": tenant_id, "backend": "file", "size": len(credentials)},
        )

    async def delete_async(self, tenant_id: str) -> bool:
        """Remove o diretório do tenant inteiro."""
        try:
            return await asyncio.to_thread(self._delete_sync, tenant_id)
        except OSError as exc:
            raise PersistenceError(
                f"Falha ao remover credenciais: {exc}", tenant_id=tenant_id
            ) from exc

    async def exists_async(self, tenant_id: str) -> bool:
        """Verifica se há blob gravado."""
        return await asyncio.to_thread(self._creds_path(tenant_id).is_file)

    async def list_tenants_async(self) -> list[str]:
        """Lista tenants com blob gravado."""
        try:
            return await asyncio.to_thread(self._list_sync)
        except OSError as exc:
            raise PersistenceError(f"Falha ao listar credenciais: {exc}") from exc

    async def ping_async(self) -> bool:
        """Diretório raiz acessível para escrita (ou criável)."""

        def _check() -> bool:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            return os.access(self._base_dir, os.W_OK)

        return await asyncio.to_thread(_check)
