#!/usr/bin/env python3
"""Lista ou remove blobs de credenciais do credential store configurado.

Uso:
    python scripts/purge_credentials.py --tenant loja-1 --tenant loja-2 --apply
    python scripts/purge_credentials.py --all

Padrao: dry-run (nao remove nada). Usa CREDENTIAL_STORE_BACKEND,
CREDENTIALS_DIR e REDIS_URL do ambiente. Nao deve rodar com o
gateway ativo para os mesmos tenants.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from app.bootstrap.dependencies import create_credential_store
from app.protocols.credential_store import CredentialStoreProtocol


@dataclass(frozen=True)
class PurgeStats:
    found: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()


async def purge_credentials(
    store: CredentialStoreProtocol,
    tenant_ids: Sequence[str],
    *,
    purge_all: bool,
    apply: bool,
) -> PurgeStats:
    stored = set(await store.list_tenants_async())
    targets = sorted(stored) if purge_all else list(dict.fromkeys(tenant_ids))

    found = tuple(tenant_id for tenant_id in targets if tenant_id in stored)
    missing = tuple(tenant_id for tenant_id in targets if tenant_id not in stored)
    if not apply:
        return PurgeStats(found=found, missing=missing)

    deleted = []
    for tenant_id in found:
        if await store.delete_async(tenant_id):
            deleted.append(tenant_id)
    return PurgeStats(found=found, missing=missing, deleted=tuple(deleted))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--tenant",
        action="append",
        dest="tenants",
        default=[],
        help="Tenant a processar (pode repetir).",
    )
    target.add_argument(
        "--all",
        action="store_true",
        dest="purge_all",
        help="Processa todos os tenants com credenciais salvas.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Remove os blobs. Sem esta flag executa dry-run.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    stats = asyncio.run(
        purge_credentials(
            create_credential_store(),
            args.tenants,
            purge_all=args.purge_all,
            apply=args.apply,
        )
    )
    mode = "apply" if args.apply else "dry-run"
    print(
        f"[{mode}] found={len(stats.found)} "
        f"missing={len(stats.missing)} deleted={len(stats.deleted)}"
    )
    for tenant_id in stats.found:
        marker = "deleted" if tenant_id in stats.deleted else "found"
        print(f"  {marker}: {tenant_id}")
    for tenant_id in stats.missing:
        print(f"  missing: {tenant_id}")


if __name__ == "__main__":
    main()
