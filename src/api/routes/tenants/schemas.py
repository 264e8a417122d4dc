"""Schemas pydantic das rotas de tenants."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    address: str = Field(min_length=1, max_length=64)
    text: str = Field(min_length=1, max_length=65536)


class SendMediaRequest(BaseModel):
    address: str = Field(min_length=1, max_length=64)
    media_kind: str = Field(min_length=1, max_length=32)
    file_path: str = Field(min_length=1, max_length=4096)
    caption: str | None = Field(default=None, max_length=4096)


class SendResponse(BaseModel):
    success: bool
    message_id: str | None = None


class ConnectResponse(BaseModel):
    success: bool = True
    tenant_id: str
    outcome: str
    state: str


class PairingChallengeResponse(BaseModel):
    """status: token (com pairing_challenge), connected ou waiting."""

    tenant_id: str
    status: str
    pairing_challenge: str | None = None
    expires_at: str | None = None


class TenantStatusResponse(BaseModel):
    tenant_id: str
    state: str
    connected: bool
    has_pairing_challenge: bool
    reconnect_attempts: int
    is_connecting: bool
    last_error: str | None = None
    account_id: str | None = None
    updated_at: str
    recent_transitions: list[dict[str, Any]] = Field(default_factory=list)


class TenantListResponse(BaseModel):
    tenants: list[TenantStatusResponse]
    total: int


class AckResponse(BaseModel):
    success: bool = True
    tenant_id: str
    message: str


class DeleteResponse(BaseModel):
    success: bool = True
    tenant_id: str
    deleted: bool


class ClearResponse(BaseModel):
    success: bool = True
    cleared: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
