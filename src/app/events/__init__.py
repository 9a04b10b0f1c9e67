"""Eventos da rede: tipos, roteador e assinaturas."""

from app.events.models import (
    PUBLIC_EVENT_KINDS,
    ConnectedEvent,
    DisconnectedEvent,
    EventKind,
    GatewayEvent,
    LoggedOutEvent,
    MessageEvent,
    QREvent,
    normalize_event_kinds,
)
from app.events.router import EventRouter, classify_event
from app.events.subscriptions import register_webhook_handlers

__all__ = [
    "PUBLIC_EVENT_KINDS",
    "ConnectedEvent",
    "DisconnectedEvent",
    "EventKind",
    "EventRouter",
    "GatewayEvent",
    "LoggedOutEvent",
    "MessageEvent",
    "QREvent",
    "classify_event",
    "normalize_event_kinds",
    "register_webhook_handlers",
]
