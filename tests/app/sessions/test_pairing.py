"""Testes do pareamento (stream de QR com conexão dirigida)."""

from __future__ import annotations

import asyncio

import pytest

from app.infra.stores import MemoryDeviceMappingStore
from app.protocols.network_client import PairingEvent
from app.sessions import SessionRegistry
from app.sessions.pairing import connect_with_retries
from tests.fakes.fake_network import FakeBackend, FakeDevice
from utils.errors import AlreadyAuthenticatedError

USER_ID = "tenant-1"
PAIRED_JID = "5511999990000:2@s.whatsapp.net"


def _registry(backend: FakeBackend, **kwargs: float) -> SessionRegistry:
    return SessionRegistry(
        backend,
        MemoryDeviceMappingStore(),
        qr_retry_backoff_seconds=0.0,
        qr_reconnect_delay_seconds=0.0,
        **kwargs,
    )


class TestGetQrChannel:
    """Testes de get_qr_channel."""

    @pytest.mark.asyncio
    async def test_stream_yields_codes_until_success(self) -> None:
        backend = FakeBackend(
            qr_events=[
                PairingEvent("code", code="qr-1"),
                PairingEvent("code", code="qr-2"),
                PairingEvent("success"),
            ]
        )
        registry = _registry(backend)

        stream = await registry.get_qr_channel(USER_ID)
        events = [item async for item in stream]

        assert [item.event for item in events] == ["code", "code", "success"]
        assert events[0].code == "qr-1"
        assert stream.closed is True
        await asyncio.sleep(0)
        assert backend.last_client.connect_calls == 1

    @pytest.mark.asyncio
    async def test_creates_session_when_missing(self) -> None:
        backend = FakeBackend(qr_events=[PairingEvent("success")])
        registry = _registry(backend)

        stream = await registry.get_qr_channel(USER_ID)
        await stream.aclose()

        assert USER_ID in registry

    @pytest.mark.asyncio
    async def test_already_authenticated_raises(self) -> None:
        backend = FakeBackend({PAIRED_JID: FakeDevice(PAIRED_JID)})
        registry = SessionRegistry(backend, MemoryDeviceMappingStore({USER_ID: PAIRED_JID}))

        with pytest.raises(AlreadyAuthenticatedError):
            await registry.get_qr_channel(USER_ID)

    @pytest.mark.asyncio
    async def test_connected_session_is_disconnected_first(self) -> None:
        backend = FakeBackend(qr_events=[PairingEvent("success")])
        registry = _registry(backend)
        await registry.create_session(USER_ID)
        await registry.connect(USER_ID)

        stream = await registry.get_qr_channel(USER_ID)
        await stream.aclose()

        assert backend.last_client.disconnect_calls == 1

    @pytest.mark.asyncio
    async def test_pairing_timeout_emits_timeout_and_cancels_driver(self) -> None:
        """Prazo esgotado: evento sintético de timeout e conexão cancelada."""
        backend = FakeBackend(qr_events=[PairingEvent("code", code="qr-1")], connect_delay=5.0)
        registry = _registry(backend, pairing_timeout_seconds=0.05)

        stream = await registry.get_qr_channel(USER_ID)
        events = [item async for item in stream]
        await asyncio.sleep(0)

        assert [item.event for item in events] == ["code", "timeout"]
        assert stream._driver.cancelled() is True

    @pytest.mark.asyncio
    async def test_abandoned_stream_expires_without_reader(self) -> None:
        """Consumidor some sem fechar: o prazo ainda encerra o pareamento."""
        backend = FakeBackend(qr_events=[PairingEvent("code", code="qr-1")], connect_delay=5.0)
        registry = _registry(backend, pairing_timeout_seconds=0.05)

        stream = await registry.get_qr_channel(USER_ID)
        await asyncio.sleep(0.2)

        assert stream.closed is True
        assert stream._driver.cancelled() is True
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_close_before_deadline_stops_expiry(self) -> None:
        backend = FakeBackend(qr_events=[PairingEvent("success")])
        registry = _registry(backend, pairing_timeout_seconds=0.05)

        stream = await registry.get_qr_channel(USER_ID)
        events = [item.event async for item in stream]
        await asyncio.sleep(0.1)

        assert events == ["success"]
        assert stream._expiry is None
        assert stream._driver.cancelled() is False

    @pytest.mark.asyncio
    async def test_consumer_close_cancels_driver(self) -> None:
        backend = FakeBackend(qr_events=[PairingEvent("code", code="qr-1")], connect_delay=5.0)
        registry = _registry(backend)

        stream = await registry.get_qr_channel(USER_ID)
        first = await anext(stream)
        await stream.aclose()
        await asyncio.sleep(0)

        assert first.code == "qr-1"
        assert stream._driver.cancelled() is True
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_error_event_closes_stream(self) -> None:
        backend = FakeBackend(qr_events=[PairingEvent("error", error="bad pairing")])
        registry = _registry(backend)

        stream = await registry.get_qr_channel(USER_ID)
        events = [item.to_dict() async for item in stream]

        assert events == [{"event": "error", "error": "bad pairing"}]


class TestConnectWithRetries:
    """Testes de connect_with_retries."""

    @pytest.mark.asyncio
    async def test_retries_until_exhausted(self) -> None:
        backend = FakeBackend(connect_error=OSError("unreachable"))
        registry = _registry(backend)
        session = await registry.create_session(USER_ID)

        ok = await connect_with_retries(session, max_attempts=3, backoff_seconds=0.0)

        assert ok is False
        assert backend.last_client.connect_calls == 3

    @pytest.mark.asyncio
    async def test_returns_on_first_success(self) -> None:
        backend = FakeBackend()
        registry = _registry(backend)
        session = await registry.create_session(USER_ID)

        ok = await connect_with_retries(session, max_attempts=3, backoff_seconds=0.0)

        assert ok is True
        assert backend.last_client.connect_calls == 1
