"""Endpoints de gestão de tenants.

Status, QR, envio e connect criam a sessão sob demanda (get_or_create).
Erros de domínio são traduzidos por api.routes.errors.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from api.routes.tenants.dependencies import Registry, TenantId, require_api_key
from api.routes.tenants.schemas import (
    AckResponse,
    ClearResponse,
    ConnectResponse,
    DeleteResponse,
    PairingChallengeResponse,
    SendMediaRequest,
    SendMessageRequest,
    SendResponse,
    TenantListResponse,
    TenantStatusResponse,
)
from app.infra.whatsapp import render_pairing_png
from app.sessions.models import ConnectOutcome, TenantStatus
from fsm import ConnectionState

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])


def _status_response(snapshot: TenantStatus) -> TenantStatusResponse:
    return TenantStatusResponse(**snapshot.to_dict())


@router.get("", response_model=TenantListResponse)
async def list_tenants(registry: Registry) -> TenantListResponse:
    tenants = [_status_response(snapshot) for snapshot in registry.iter_status()]
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.delete("", response_model=ClearResponse)
async def clear_tenants(registry: Registry) -> ClearResponse:
    """Destrói todas as sessões e suas credenciais."""
    cleared = await registry.clear()
    return ClearResponse(cleared=cleared)


@router.post(
    "/{tenant_id}",
    response_model=TenantStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(tenant_id: TenantId, registry: Registry) -> TenantStatusResponse:
    session = await registry.create(tenant_id)
    return _status_response(session.status())


@router.delete("/{tenant_id}", response_model=DeleteResponse)
async def delete_tenant(tenant_id: TenantId, registry: Registry) -> DeleteResponse:
    deleted = await registry.delete(tenant_id)
    return DeleteResponse(tenant_id=tenant_id, deleted=deleted)


@router.post("/{tenant_id}/connect", response_model=ConnectResponse)
async def connect_tenant(
    tenant_id: TenantId,
    registry: Registry,
    response: Response,
) -> ConnectResponse:
    """Inicia conexão; 202 se aceita/em andamento, 200 se já conectado."""
    session = await registry.get_or_create(tenant_id)
    outcome = await session.connect()
    response.status_code = (
        status.HTTP_200_OK
        if outcome == ConnectOutcome.ALREADY_CONNECTED
        else status.HTTP_202_ACCEPTED
    )
    return ConnectResponse(tenant_id=tenant_id, outcome=outcome.value, state=session.state.value)


@router.get("/{tenant_id}/pairing-challenge", response_model=PairingChallengeResponse)
async def get_pairing_challenge(
    tenant_id: TenantId,
    registry: Registry,
) -> PairingChallengeResponse | JSONResponse:
    session = await registry.get_or_create(tenant_id)
    challenge = session.pairing_challenge
    if challenge is not None:
        return PairingChallengeResponse(
            tenant_id=tenant_id,
            status="token",
            pairing_challenge=challenge.token,
            expires_at=challenge.expires_at.isoformat(),
        )
    if session.state == ConnectionState.CONNECTED:
        return PairingChallengeResponse(tenant_id=tenant_id, status="connected")
    if session.state in (ConnectionState.IDLE, ConnectionState.FAILED):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "success": False,
                "error": "not_connecting",
                "message": "Tenant não está conectando; chame /connect primeiro",
            },
        )
    return PairingChallengeResponse(tenant_id=tenant_id, status="waiting")


@router.get(
    "/{tenant_id}/pairing-challenge.png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_pairing_challenge_png(tenant_id: TenantId, registry: Registry) -> Response:
    session = await registry.get_or_create(tenant_id)
    challenge = session.pairing_challenge
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="no_pairing_challenge",
        )
    png = await asyncio.to_thread(render_pairing_png, challenge.token)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )


@router.get("/{tenant_id}/status", response_model=TenantStatusResponse)
async def get_tenant_status(tenant_id: TenantId, registry: Registry) -> TenantStatusResponse:
    session = await registry.get_or_create(tenant_id)
    return _status_response(session.status())


@router.post("/{tenant_id}/messages", response_model=SendResponse)
async def send_message(
    tenant_id: TenantId,
    body: SendMessageRequest,
    registry: Registry,
) -> SendResponse:
    session = await registry.get_or_create(tenant_id)
    result = await session.send_message(body.address, body.text)
    return SendResponse(success=result.success, message_id=result.message_id)


@router.post("/{tenant_id}/media", response_model=SendResponse)
async def send_media(
    tenant_id: TenantId,
    body: SendMediaRequest,
    registry: Registry,
) -> SendResponse:
    session = await registry.get_or_create(tenant_id)
    result = await session.send_media(body.address, body.media_kind, body.file_path, body.caption)
    return SendResponse(success=result.success, message_id=result.message_id)


@router.post("/{tenant_id}/disconnect", response_model=AckResponse)
async def disconnect_tenant(tenant_id: TenantId, registry: Registry) -> AckResponse:
    await registry.disconnect(tenant_id)
    return AckResponse(tenant_id=tenant_id, message="Desconectado; credenciais mantidas")
