"""Entrypoint do gateway WhatsApp multi-tenant.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.routes import create_api_router, register_exception_handlers
from app.bootstrap import get_credential_store, initialize_app, validate_runtime_settings
from app.bootstrap.clients import create_async_redis_client
from app.bootstrap.dependencies import create_registry, create_webhook_relay
from app.observability import (
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from config.logging import get_logger
from config.settings import get_base_settings, get_gateway_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Monta credential store, relay e registry
    - Restaura sessões com credenciais salvas (opcional)

    Shutdown:
    - Encerra sessões sem logout
    - Drena webhooks pendentes e fecha conexões
    """
    service = get_base_settings().service_name
    logger.info("app_starting", extra={"service": service})
    validate_runtime_settings()

    app.state.redis_client = None
    if get_base_settings().redis_url:
        try:
            app.state.redis_client = create_async_redis_client()
        except Exception as exc:
            logger.warning("redis_client_not_ready", extra={"error_type": type(exc).__name__})

    app.state.credential_store = get_credential_store()
    app.state.webhook_relay = create_webhook_relay()
    app.state.registry = create_registry(
        relay=app.state.webhook_relay,
        credential_store=app.state.credential_store,
    )

    if get_gateway_settings().restore_on_startup:
        try:
            await app.state.registry.restore()
        except Exception:
            logger.exception("tenant_restore_aborted")

    yield

    logger.info("app_shutting_down", extra={"service": service})
    await app.state.registry.shutdown()
    await app.state.webhook_relay.drain(SHUTDOWN_DRAIN_TIMEOUT_SECONDS)
    await app.state.webhook_relay.aclose()
    redis_client = getattr(app.state, "redis_client", None)
    if redis_client is not None:
        await redis_client.aclose()


async def correlation_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Propaga X-Correlation-ID (gera um novo se ausente)."""
    token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    try:
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
    finally:
        reset_correlation_id(token)


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="wa_gateway",
        description="Gateway WhatsApp multi-tenant: sessões, pareamento e webhooks",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    allowed_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
        if origin.strip()
    ]
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allowed_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    fastapi_app.middleware("http")(correlation_id_middleware)

    register_exception_handlers(fastapi_app)
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": get_base_settings().service_name})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint do console script; reload só em development."""
    import uvicorn

    settings = get_base_settings()
    reload = settings.is_development
    logger.info(
        "app_server_starting",
        extra={"environment": settings.environment, "reload": reload},
    )
    uvicorn.run(
        "app.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        reload=reload,
    )


if __name__ == "__main__":
    main()
