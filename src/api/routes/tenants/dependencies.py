"""Dependências FastAPI das rotas de tenants."""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Path, Request, status

from app.sessions.registry import TenantRegistry
from config.settings import get_gateway_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
TENANT_ID_PATTERN = r"^[A-Za-z0-9_.-]{1,64}$"

TenantId = Annotated[
    str,
    Path(pattern=TENANT_ID_PATTERN, description="Identificador do tenant"),
]


def require_api_key(
    x_api_key: Annotated[str | None, Header(alias=API_KEY_HEADER)] = None,
) -> None:
    """Exige GATEWAY_API_TOKEN no header X-API-Key (desligado se vazio)."""
    expected = get_gateway_settings().api_token
    if not expected:
        return
    if x_api_key is None or not hmac.compare_digest(x_api_key, expected):
        logger.warning("api_key_rejected", extra={"has_header": x_api_key is not None})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_api_key",
        )


def get_registry(request: Request) -> TenantRegistry:
    return request.app.state.registry


Registry = Annotated[TenantRegistry, Depends(get_registry)]
