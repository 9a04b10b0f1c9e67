"""Fixtures das rotas: app com container montado sobre a rede fake."""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from app.app import create_app
from app.bootstrap.dependencies import create_container
from app.infra.stores import MemoryDeviceMappingStore
from app.infra.webhook import WebhookDispatcher
from config.settings import BaseSettings, SessionSettings, WhatsAppSettings
from tests.fakes.fake_network import FakeBackend

KNOWN_NUMBER = "5511988376411"


class WebhookReceiver:
    """Endpoint de webhook em memória (httpx.MockTransport)."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(existing_numbers={KNOWN_NUMBER})


@pytest.fixture
def webhook_receiver() -> WebhookReceiver:
    return WebhookReceiver()


@pytest_asyncio.fixture
async def container(backend: FakeBackend, webhook_receiver: WebhookReceiver):
    dispatcher = WebhookDispatcher(
        httpx.AsyncClient(transport=httpx.MockTransport(webhook_receiver.handler))
    )
    built = create_container(
        backend,
        mapping_store=MemoryDeviceMappingStore(),
        dispatcher=dispatcher,
        base_settings=BaseSettings(),
        session_settings=SessionSettings(
            connect_timeout_seconds=0.05,
            qr_retry_backoff_seconds=0.0,
        ),
        whatsapp_settings=WhatsAppSettings(client_factory="x:y"),
    )
    yield built
    await built.shutdown()


@pytest_asyncio.fixture
async def client(container):
    """Cliente HTTP sobre o app; o lifespan não roda, o container é injetado."""
    fastapi_app = create_app(container_factory=lambda: container)
    fastapi_app.state.container = container
    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
