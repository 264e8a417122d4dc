"""Stores — implementações concretas de persistência de credenciais.

Módulos disponíveis:
    - redis_credential_store: Store de credenciais usando Redis
    - file_credential_store: Store de credenciais em disco (um diretório por tenant)
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.file_credential_store import FileCredentialStore
from app.infra.stores.memory_stores import MemoryCredentialStore
from app.infra.stores.redis_credential_store import RedisCredentialStore

__all__ = [
    # File
    "FileCredentialStore",
    # Memory (dev/test)
    "MemoryCredentialStore",
    # Redis
    "RedisCredentialStore",
]
