"""Testes dos endpoints de health e readiness."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import Request

from api.routes.health.router import health_check, readiness_check
from app.infra.webhook import WebhookStatus


def _build_request_with_state(state: SimpleNamespace) -> Request:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/ready",
        "raw_path": b"/ready",
        "query_string": b"",
        "headers": [],
        "app": SimpleNamespace(state=state),
    }

    async def _receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, _receive)


def _container(store: MagicMock, webhook_status: WebhookStatus) -> SimpleNamespace:
    dispatcher = MagicMock()
    dispatcher.get_status.return_value = webhook_status
    registry = MagicMock()
    registry.list_sessions.return_value = [
        SimpleNamespace(connected=True),
        SimpleNamespace(connected=False),
    ]
    return SimpleNamespace(mapping_store=store, dispatcher=dispatcher, registry=registry)


@pytest.mark.asyncio
async def test_health_is_always_healthy() -> None:
    response = await health_check()
    assert response.status == "healthy"
    assert response.service == "wa-gateway"


@pytest.mark.asyncio
async def test_readiness_returns_not_ready_without_container() -> None:
    request = _build_request_with_state(SimpleNamespace(container=None))

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["status"] == "not_ready"
    assert payload["checks"]["gateway"]["error"] == "not_initialized"


@pytest.mark.asyncio
async def test_readiness_ready_with_unconfigured_webhook() -> None:
    """Webhook sem URL só degrada; store respondendo basta para ready."""
    store = MagicMock()
    store.get_all_mappings = AsyncMock(return_value={})
    request = _build_request_with_state(
        SimpleNamespace(container=_container(store, WebhookStatus(url="")))
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["status"] == "ready"
    assert payload["checks"]["device_store"]["status"] == "ok"
    assert payload["checks"]["webhook"] == {
        "status": "degraded",
        "latency_ms": None,
        "error": "not_configured",
    }
    assert payload["sessions"] == {"total": 2, "connected": 1}


@pytest.mark.asyncio
async def test_readiness_not_ready_when_store_fails() -> None:
    store = MagicMock()
    store.get_all_mappings = AsyncMock(side_effect=ConnectionError("redis down"))
    webhook_status = WebhookStatus(url="https://hooks.example.com", connected=True)
    request = _build_request_with_state(
        SimpleNamespace(container=_container(store, webhook_status))
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["checks"]["device_store"]["error"] == "ConnectionError"
    assert payload["checks"]["webhook"]["status"] == "ok"
