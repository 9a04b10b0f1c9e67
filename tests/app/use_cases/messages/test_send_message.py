"""Testes do MessageService (envio de texto/mídia e verificação de número)."""

from __future__ import annotations

import pytest

from app.infra.stores import MemoryDeviceMappingStore
from app.recipients.resolver import RecipientResolver
from app.sessions import SessionRegistry
from app.use_cases.messages import MessageService
from tests.fakes.fake_network import FakeBackend
from utils.errors import (
    ConnectionTimeoutError,
    InvalidAddressError,
    InvalidMessageError,
    SessionNotConnectedError,
    SessionNotFoundError,
    UpstreamUnavailableError,
)

USER_ID = "tenant-1"
KNOWN = "5511988376411"


async def _service(
    *, connect: bool = True, **client_options: object
) -> tuple[MessageService, FakeBackend]:
    client_options.setdefault("existing_numbers", {KNOWN})
    backend = FakeBackend(**client_options)
    registry = SessionRegistry(backend, MemoryDeviceMappingStore())
    await registry.create_session(USER_ID)
    if connect:
        await registry.connect(USER_ID)
    resolver = RecipientResolver(registry, probe_timeout_seconds=1.0)
    service = MessageService(
        registry, resolver, text_timeout_seconds=0.05, media_timeout_seconds=0.05
    )
    return service, backend


class TestSendText:
    """Testes de send_text."""

    @pytest.mark.asyncio
    async def test_sends_to_verified_recipient(self) -> None:
        service, backend = await _service()

        result = await service.send_text(USER_ID, "11988376411", "olá")

        assert result.message_id == "MSG-1"
        assert result.recipient == f"{KNOWN}@s.whatsapp.net"
        assert result.verified is True
        to, message = backend.last_client.sent[0]
        assert to == f"{KNOWN}@s.whatsapp.net"
        assert message.text == "olá"

    @pytest.mark.asyncio
    async def test_unverified_recipient_still_sent(self) -> None:
        """Número não confirmado: envio segue com verified=False."""
        service, backend = await _service(existing_numbers=set())

        result = await service.send_text(USER_ID, "5521987654321", "oi")

        assert result.verified is False
        assert result.recipient == "5521987654321@s.whatsapp.net"
        assert len(backend.last_client.sent) == 1

    @pytest.mark.asyncio
    async def test_group_jid_skips_probe(self) -> None:
        service, backend = await _service()

        result = await service.send_text(USER_ID, "120363025246125888@g.us", "oi grupo")

        assert result.recipient == "120363025246125888@g.us"
        assert backend.last_client.probe_queries == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_text_rejected(self, text: str) -> None:
        service, backend = await _service()

        with pytest.raises(InvalidMessageError):
            await service.send_text(USER_ID, KNOWN, text)
        assert backend.last_client.sent == []

    @pytest.mark.asyncio
    async def test_invalid_recipient_rejected(self) -> None:
        service, _ = await _service()

        with pytest.raises(InvalidAddressError):
            await service.send_text(USER_ID, "abc", "oi")

    @pytest.mark.asyncio
    async def test_unknown_session(self) -> None:
        service, _ = await _service()

        with pytest.raises(SessionNotFoundError):
            await service.send_text("ghost", KNOWN, "oi")

    @pytest.mark.asyncio
    async def test_disconnected_session(self) -> None:
        service, _ = await _service(connect=False)

        with pytest.raises(SessionNotConnectedError):
            await service.send_text(USER_ID, KNOWN, "oi")

    @pytest.mark.asyncio
    async def test_send_timeout(self) -> None:
        service, _ = await _service(send_delay=1.0)

        with pytest.raises(ConnectionTimeoutError):
            await service.send_text(USER_ID, KNOWN, "oi")

    @pytest.mark.asyncio
    async def test_adapter_failure_becomes_upstream_error(self) -> None:
        service, _ = await _service(send_error=RuntimeError("socket closed"))

        with pytest.raises(UpstreamUnavailableError):
            await service.send_text(USER_ID, KNOWN, "oi")


class TestSendMedia:
    """Testes de send_media."""

    @pytest.mark.asyncio
    async def test_sends_media_reference(self) -> None:
        service, backend = await _service()

        await service.send_media(
            USER_ID, KNOWN, "https://cdn.example.com/a.png", "IMAGE", caption="foto"
        )

        _, message = backend.last_client.sent[0]
        assert message.media_url == "https://cdn.example.com/a.png"
        assert message.media_type == "image"
        assert message.caption == "foto"

    @pytest.mark.asyncio
    async def test_unknown_media_type_rejected(self) -> None:
        service, _ = await _service()

        with pytest.raises(InvalidMessageError):
            await service.send_media(USER_ID, KNOWN, "https://cdn.example.com/a.gif", "sticker")

    @pytest.mark.asyncio
    async def test_non_http_url_rejected(self) -> None:
        service, _ = await _service()

        with pytest.raises(InvalidMessageError):
            await service.send_media(USER_ID, KNOWN, "file:///etc/passwd", "document")


class TestCheckNumber:
    """Testes de check_number."""

    @pytest.mark.asyncio
    async def test_existing_number(self) -> None:
        service, _ = await _service()

        check = await service.check_number(USER_ID, "11988376411")

        assert check.exists is True
        assert check.jid == f"{KNOWN}@s.whatsapp.net"

    @pytest.mark.asyncio
    async def test_requires_connection(self) -> None:
        service, _ = await _service(connect=False)

        with pytest.raises(SessionNotConnectedError):
            await service.check_number(USER_ID, KNOWN)

    @pytest.mark.asyncio
    async def test_probe_failure_propagates(self) -> None:
        service, _ = await _service(probe_error=RuntimeError("boom"))

        with pytest.raises(UpstreamUnavailableError):
            await service.check_number(USER_ID, KNOWN)
