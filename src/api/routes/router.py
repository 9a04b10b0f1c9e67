"""Agregador de rotas.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health.router import router as health_router
from api.routes.messages import router as messages_router
from api.routes.sessions import router as sessions_router
from api.routes.webhook import router as webhook_router

API_PREFIX = "/api/v1"


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados."""
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    api_router.include_router(sessions_router, prefix=f"{API_PREFIX}/sessions", tags=["sessions"])
    api_router.include_router(messages_router, prefix=f"{API_PREFIX}/messages", tags=["messages"])
    api_router.include_router(webhook_router, prefix=f"{API_PREFIX}/webhook", tags=["webhook"])

    return api_router
