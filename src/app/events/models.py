"""Tipos de evento roteados para assinantes.

Conjunto fechado de variantes, cada uma com payload tipado. O tipo
`test` é reservado para a sonda do webhook e nunca sai do adaptador.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar


class EventKind(StrEnum):
    """Tipo do evento (valor usado em `event_type` no webhook)."""

    MESSAGE = "message"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    QR = "qr"
    LOGGED_OUT = "logged_out"
    TEST = "test"


# Tipos que o roteador publica (tudo exceto a sonda)
PUBLIC_EVENT_KINDS: tuple[EventKind, ...] = (
    EventKind.MESSAGE,
    EventKind.CONNECTED,
    EventKind.DISCONNECTED,
    EventKind.QR,
    EventKind.LOGGED_OUT,
)

# Campos de conteúdo repassados no payload de mensagem
MESSAGE_CONTENT_FIELDS = ("text", "caption", "mimetype", "ptt", "title")


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True, slots=True)
class MessageEvent:
    kind: ClassVar[EventKind] = EventKind.MESSAGE

    message_id: str
    sender: str
    chat: str
    timestamp: int
    from_me: bool = False
    is_group: bool = False
    push_name: str = ""
    message_type: str = "text"
    content: dict[str, Any] = field(default_factory=dict)
    broadcast_owner: str = ""

    def to_payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "message_id": self.message_id,
            "from": self.sender,
            "chat": self.chat,
            "timestamp": self.timestamp,
            "from_me": self.from_me,
            "is_group": self.is_group,
            "push_name": self.push_name,
            "message_type": self.message_type,
        }
        if self.broadcast_owner:
            data["broadcast_owner"] = self.broadcast_owner
        for key in MESSAGE_CONTENT_FIELDS:
            if key in self.content:
                data[key] = self.content[key]
        return data


@dataclass(frozen=True, slots=True)
class ConnectedEvent:
    kind: ClassVar[EventKind] = EventKind.CONNECTED

    timestamp: int = field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        return {"status": "connected", "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class DisconnectedEvent:
    kind: ClassVar[EventKind] = EventKind.DISCONNECTED

    timestamp: int = field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        return {"status": "disconnected", "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class QREvent:
    kind: ClassVar[EventKind] = EventKind.QR

    codes: tuple[str, ...]
    timestamp: int = field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        return {"codes": list(self.codes), "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class LoggedOutEvent:
    kind: ClassVar[EventKind] = EventKind.LOGGED_OUT

    reason: str = ""
    on_connect: bool = False
    timestamp: int = field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "logged_out",
            "reason": self.reason,
            "on_connect": self.on_connect,
            "timestamp": self.timestamp,
        }


GatewayEvent = MessageEvent | ConnectedEvent | DisconnectedEvent | QREvent | LoggedOutEvent


def normalize_event_kinds(kinds: list[str] | None) -> frozenset[str]:
    """Mantém apenas tipos públicos válidos; vazio após filtro → todos.

    Args:
        kinds: Tipos informados pelo configurador (case-insensitive).

    Returns:
        Conjunto de tipos habilitados (nunca vazio).
    """
    valid = {kind.value for kind in PUBLIC_EVENT_KINDS}
    selected = {k.strip().lower() for k in kinds or [] if k and k.strip().lower() in valid}
    return frozenset(selected or valid)
