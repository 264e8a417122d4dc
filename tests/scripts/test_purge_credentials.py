"""Testes do script de limpeza de credenciais."""

from __future__ import annotations

import pytest

from app.infra.stores import MemoryCredentialStore
from scripts.purge_credentials import PurgeStats, main, parse_args, purge_credentials


@pytest.fixture
async def store() -> MemoryCredentialStore:
    store = MemoryCredentialStore()
    for tenant_id in ("alpha", "beta"):
        await store.save_async(tenant_id, b"blob")
    return store


async def test_dry_run_keeps_blobs(store) -> None:
    stats = await purge_credentials(store, ["alpha", "ghost"], purge_all=False, apply=False)

    assert stats == PurgeStats(found=("alpha",), missing=("ghost",))
    assert await store.exists_async("alpha")


async def test_apply_deletes_selected(store) -> None:
    stats = await purge_credentials(store, ["alpha", "alpha"], purge_all=False, apply=True)

    assert stats.deleted == ("alpha",)
    assert await store.list_tenants_async() == ["beta"]


async def test_all_targets_every_stored_tenant(store) -> None:
    stats = await purge_credentials(store, [], purge_all=True, apply=True)

    assert stats.deleted == ("alpha", "beta")
    assert await store.list_tenants_async() == []


def test_target_is_required() -> None:
    with pytest.raises(SystemExit):
        parse_args([])


def test_tenant_and_all_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--all", "--tenant", "alpha"])


def test_main_prints_summary(monkeypatch, capsys) -> None:
    store = MemoryCredentialStore()
    monkeypatch.setattr("scripts.purge_credentials.create_credential_store", lambda: store)

    main(["--tenant", "alpha"])

    output = capsys.readouterr().out
    assert "[dry-run] found=0 missing=1 deleted=0" in output
    assert "missing: alpha" in output
