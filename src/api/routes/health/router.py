"""Endpoints de health check (liveness e readiness)."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings

router = APIRouter()

DEPENDENCY_CHECK_TIMEOUT_SECONDS = 2.0


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe — verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: credential store acessível e registry montado."""
    store_check = await _check_credential_store(
        getattr(request.app.state, "credential_store", None)
    )
    registry = getattr(request.app.state, "registry", None)
    ready = store_check.status == "ok" and registry is not None

    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {"credential_store": store_check.as_dict()},
        "tenants": len(registry) if registry is not None else 0,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_credential_store(store: Any | None) -> DependencyCheck:
    if store is None:
        return DependencyCheck(status="failed", error="not_configured")
    started_at = time.perf_counter()
    try:
        healthy = await asyncio.wait_for(
            store.ping_async(), timeout=DEPENDENCY_CHECK_TIMEOUT_SECONDS
        )
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    if not healthy:
        return DependencyCheck(status="failed", latency_ms=round(latency_ms, 2), error="unhealthy")
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))
