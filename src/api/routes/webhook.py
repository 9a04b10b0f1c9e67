"""Endpoints de configuração do webhook de eventos.

- POST /webhook/configure: aplica url/eventos/segredo e testa a entrega
- GET  /webhook/status: configuração atual + saúde observada
- POST /webhook/test: entrega de teste manual

A configuração permanece aplicada mesmo quando o teste falha (502).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.routes.dependencies import get_dispatcher
from app.events import normalize_event_kinds
from app.infra.webhook import WebhookDispatcher

router = APIRouter()


class WebhookConfigureRequest(BaseModel):
    url: str = Field(pattern=r"^https?://")
    events: list[str] = Field(default_factory=list)
    secret: str = ""


@router.post("/configure")
async def configure_webhook(
    body: WebhookConfigureRequest,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    status = await dispatcher.configure(
        body.url,
        events=normalize_event_kinds(body.events),
        secret=body.secret,
    )
    return status.to_dict()


@router.get("/status")
async def webhook_status(dispatcher: WebhookDispatcher = Depends(get_dispatcher)) -> dict[str, Any]:
    return dispatcher.get_status().to_dict()


@router.post("/test")
async def test_webhook(dispatcher: WebhookDispatcher = Depends(get_dispatcher)) -> dict[str, Any]:
    status = await dispatcher.send_test()
    return status.to_dict()
