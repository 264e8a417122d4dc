"""Testes do FileCredentialStore (diretório por tenant)."""

from __future__ import annotations

import stat

import pytest

from app.infra.stores import FileCredentialStore
from app.infra.stores.file_credential_store import CREDENTIALS_FILENAME
from utils.errors import PersistenceError


@pytest.fixture
def store(tmp_path) -> FileCredentialStore:
    return FileCredentialStore(tmp_path / "auth_info")


class TestFileCredentialStore:
    async def test_load_missing_returns_none(self, store) -> None:
        assert await store.load_async("acme") is None
        assert await store.exists_async("acme") is False

    async def test_save_creates_tenant_dir(self, store) -> None:
        await store.save_async("acme", b"\x00\x01blob")

        tenant_dir = store.tenant_dir("acme")
        assert tenant_dir.name == "tenant_acme"
        assert (tenant_dir / CREDENTIALS_FILENAME).read_bytes() == b"\x00\x01blob"
        assert (tenant_dir / ".gitignore").read_text(encoding="utf-8") == "*\n"
        assert await store.load_async("acme") == b"\x00\x01blob"

    async def test_credentials_file_is_private(self, store) -> None:
        await store.save_async("acme", b"blob")

        mode = (store.tenant_dir("acme") / CREDENTIALS_FILENAME).stat().st_mode
        assert stat.S_IMODE(mode) == 0o600

    async def test_overwrite_leaves_no_temp_files(self, store) -> None:
        await store.save_async("acme", b"v1")
        await store.save_async("acme", b"v2")

        names = sorted(p.name for p in store.tenant_dir("acme").iterdir())
        assert names == [".gitignore", CREDENTIALS_FILENAME]
        assert await store.load_async("acme") == b"v2"

    async def test_delete_removes_directory(self, store) -> None:
        await store.save_async("acme", b"blob")

        assert await store.delete_async("acme") is True
        assert not store.tenant_dir("acme").exists()
        assert await store.delete_async("acme") is False

    async def test_list_ignores_dirs_without_credentials(self, store) -> None:
        await store.save_async("beta", b"x")
        await store.save_async("alpha", b"y")
        store.tenant_dir("empty").mkdir(parents=True)
        (store.base_dir / "unrelated").mkdir()

        assert await store.list_tenants_async() == ["alpha", "beta"]

    async def test_list_without_base_dir(self, store) -> None:
        assert await store.list_tenants_async() == []

    async def test_ping_creates_base_dir(self, store) -> None:
        assert await store.ping_async() is True
        assert store.base_dir.is_dir()

    async def test_os_error_becomes_persistence_error(self, tmp_path) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        store = FileCredentialStore(blocker)

        with pytest.raises(PersistenceError) as exc_info:
            await store.save_async("acme", b"blob")

        assert exc_info.value.tenant_id == "acme"
