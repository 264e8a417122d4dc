"""Tradução de erros de domínio para respostas HTTP estruturadas.

Corpo padrão: {"success": false, "error": <código>, "message": <texto>}.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import (
    AlreadyExistsError,
    GatewayError,
    InvalidAddressError,
    InvalidMediaError,
    NotConnectedError,
    PersistenceError,
    TenantNotFoundError,
    TransportError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: tuple[tuple[type[GatewayError], int], ...] = (
    (NotConnectedError, status.HTTP_409_CONFLICT),
    (InvalidAddressError, status.HTTP_400_BAD_REQUEST),
    (InvalidMediaError, status.HTTP_400_BAD_REQUEST),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (TenantNotFoundError, status.HTTP_404_NOT_FOUND),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_code_for(exc: GatewayError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(error: str, message: str) -> dict[str, object]:
    return {"success": False, "error": error, "message": message}


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    status_code = status_code_for(exc)
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "request_failed",
        extra={
            "tenant_id": exc.tenant_id,
            "error_code": exc.error_code,
            "status_code": status_code,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=status_code, content=error_body(exc.error_code, str(exc)))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(detail, detail),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request_unhandled_error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal_error", "Erro interno"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registra os handlers de erro no app."""
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
