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

router = APIRouter()

SERVICE_NAME = "wa-gateway"


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
    """Liveness probe: o processo está respondendo."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe.

    Pronto quando o gateway foi montado e o store de mapeamento responde.
    Webhook sem conexão apenas degrada (eventos são descartados, não bloqueiam).
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        payload = {
            "status": "not_ready",
            "checks": {
                "gateway": DependencyCheck(status="failed", error="not_initialized").as_dict(),
            },
            "timestamp": datetime.now(UTC).isoformat(),
        }
        return JSONResponse(content=payload, status_code=503)

    store_check = await _check_mapping_store(container.mapping_store)
    webhook_check = _check_webhook(container.dispatcher)
    ready = store_check.status == "ok"

    sessions = container.registry.list_sessions()
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "device_store": store_check.as_dict(),
            "webhook": webhook_check.as_dict(),
        },
        "sessions": {
            "total": len(sessions),
            "connected": sum(1 for session in sessions if session.connected),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_mapping_store(store: Any) -> DependencyCheck:
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(store.get_all_mappings(), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


def _check_webhook(dispatcher: Any) -> DependencyCheck:
    status = dispatcher.get_status()
    if not status.url:
        return DependencyCheck(status="degraded", error="not_configured")
    if status.last_error:
        return DependencyCheck(status="degraded", error=status.last_error)
    return DependencyCheck(status="ok")
