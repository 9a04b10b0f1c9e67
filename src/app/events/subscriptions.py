"""Assinatura padrão: encaminha todos os eventos públicos ao webhook."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.events.models import PUBLIC_EVENT_KINDS

if TYPE_CHECKING:
    from app.events.models import GatewayEvent
    from app.events.router import EventRouter
    from app.infra.webhook.dispatcher import WebhookDispatcher


def register_webhook_handlers(router: EventRouter, dispatcher: WebhookDispatcher) -> None:
    """Registra o dispatcher como handler de todos os tipos públicos."""

    def forward(user_id: str, event: GatewayEvent) -> None:
        dispatcher.dispatch_event(user_id, event.kind, event.to_payload())

    for kind in PUBLIC_EVENT_KINDS:
        router.register_handler(kind, forward)
