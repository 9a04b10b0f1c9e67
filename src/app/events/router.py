"""Roteador de eventos da rede para assinantes.

Recebe cada evento bruto do adaptador (já marcado com o account handle),
aplica o bookkeeping de sessão, classifica em uma variante tipada e
invoca todos os handlers registrados para aquele tipo.

Executa no caminho de callback do adaptador: nunca aguarda I/O. Trabalho
assíncrono (persistir mapeamento, reset após logout remoto) é agendado
em background no registry.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from app.events.models import (
    ConnectedEvent,
    DisconnectedEvent,
    EventKind,
    GatewayEvent,
    LoggedOutEvent,
    MessageEvent,
    QREvent,
)
from app.protocols.network_client import (
    Connected,
    Disconnected,
    LoggedOut,
    MessageReceived,
    PairingCodes,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)


def classify_event(raw: object) -> GatewayEvent | None:
    """Converte evento bruto do adaptador na variante tipada (None = desconhecido)."""
    match raw:
        case MessageReceived():
            return MessageEvent(
                message_id=raw.message_id,
                sender=raw.sender,
                chat=raw.chat,
                timestamp=int(raw.timestamp),
                from_me=raw.is_from_me,
                is_group=raw.is_group,
                push_name=raw.push_name,
                message_type=raw.message_type,
                content=dict(raw.content),
                broadcast_owner=raw.broadcast_owner,
            )
        case Connected():
            return ConnectedEvent()
        case Disconnected():
            return DisconnectedEvent()
        case PairingCodes(codes=codes):
            return QREvent(codes=tuple(codes))
        case LoggedOut(reason=reason, on_connect=on_connect):
            return LoggedOutEvent(reason=reason, on_connect=on_connect)
        case _:
            return None


class EventRouter:
    """Registro de handlers por tipo + processamento de eventos brutos."""

    __slots__ = ("_handlers", "_registry")

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry
        self._handlers: dict[EventKind, list[Callable[[str, GatewayEvent], None]]] = defaultdict(
            list
        )

    def register_handler(
        self,
        kind: EventKind,
        handler: Callable[[str, GatewayEvent], None],
    ) -> None:
        """Adiciona handler para o tipo (vários handlers por tipo)."""
        self._handlers[kind].append(handler)

    def handlers_for(self, kind: EventKind) -> list[Callable[[str, GatewayEvent], None]]:
        return list(self._handlers.get(kind, ()))

    def process_event(self, user_id: str, raw: object) -> GatewayEvent | None:
        """Processa um evento bruto de uma sessão.

        Args:
            user_id: Account handle da sessão de origem.
            raw: Evento emitido pelo adaptador.

        Returns:
            Evento tipado entregue aos handlers (None se desconhecido).
        """
        self._registry.touch(user_id)

        event = classify_event(raw)
        if event is None:
            logger.debug(
                "event_unknown_ignored",
                extra={"user_id": user_id, "event_class": type(raw).__name__},
            )
            return None

        self._apply_session_bookkeeping(user_id, event)

        for handler in self.handlers_for(event.kind):
            try:
                handler(user_id, event)
            except Exception as exc:
                logger.error(
                    "event_handler_failed",
                    extra={
                        "user_id": user_id,
                        "event_type": event.kind.value,
                        "error_type": type(exc).__name__,
                    },
                )
        return event

    def _apply_session_bookkeeping(self, user_id: str, event: GatewayEvent) -> None:
        match event:
            case ConnectedEvent():
                self._registry.mark_connected(user_id)
                self._registry.spawn(
                    self._registry.persist_device_mapping(user_id),
                    label=f"persist_mapping:{user_id}",
                )
                logger.info("session_event_connected", extra={"user_id": user_id})
            case DisconnectedEvent():
                self._registry.mark_disconnected(user_id)
                logger.info("session_event_disconnected", extra={"user_id": user_id})
            case LoggedOutEvent():
                logger.warning(
                    "session_event_logged_out",
                    extra={"user_id": user_id, "reason": event.reason},
                )
                self._registry.spawn(
                    self._registry.handle_device_logout(user_id),
                    label=f"device_logout:{user_id}",
                )
            case MessageEvent() | QREvent():
                pass
