"""Testes dos tipos de evento e do filtro de tipos habilitados."""

from __future__ import annotations

from app.events.models import (
    PUBLIC_EVENT_KINDS,
    ConnectedEvent,
    EventKind,
    LoggedOutEvent,
    MessageEvent,
    QREvent,
    normalize_event_kinds,
)

ALL_PUBLIC = frozenset(kind.value for kind in PUBLIC_EVENT_KINDS)


class TestNormalizeEventKinds:
    """Testes para normalize_event_kinds."""

    def test_keeps_valid_kinds(self) -> None:
        assert normalize_event_kinds(["message", "QR"]) == frozenset({"message", "qr"})

    def test_drops_unknown_kinds(self) -> None:
        assert normalize_event_kinds(["message", "typing"]) == frozenset({"message"})

    def test_empty_means_all(self) -> None:
        assert normalize_event_kinds([]) == ALL_PUBLIC
        assert normalize_event_kinds(None) == ALL_PUBLIC

    def test_only_invalid_means_all(self) -> None:
        assert normalize_event_kinds(["typing", "presence"]) == ALL_PUBLIC

    def test_test_kind_is_not_public(self) -> None:
        assert "test" not in normalize_event_kinds(["test"])


class TestPayloads:
    """Testes de to_payload por variante."""

    def test_message_payload(self) -> None:
        event = MessageEvent(
            message_id="ABC",
            sender="5511999990000@s.whatsapp.net",
            chat="5511999990000@s.whatsapp.net",
            timestamp=1_700_000_000,
            push_name="Maria",
            content={"text": "olá", "internal": "x"},
        )

        payload = event.to_payload()

        assert payload["message_id"] == "ABC"
        assert payload["from"] == "5511999990000@s.whatsapp.net"
        assert payload["text"] == "olá"
        assert "internal" not in payload
        assert "broadcast_owner" not in payload
        assert event.kind is EventKind.MESSAGE

    def test_connection_payloads(self) -> None:
        assert ConnectedEvent().to_payload()["status"] == "connected"
        assert QREvent(codes=("a", "b")).to_payload()["codes"] == ["a", "b"]

    def test_logged_out_payload(self) -> None:
        payload = LoggedOutEvent(reason="401", on_connect=True).to_payload()

        assert payload["status"] == "logged_out"
        assert payload["reason"] == "401"
        assert payload["on_connect"] is True
