"""Acesso aos componentes montados no lifespan (via app.state)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from app.bootstrap.dependencies import GatewayContainer
    from app.infra.webhook import WebhookDispatcher
    from app.sessions import SessionRegistry
    from app.use_cases.messages import MessageService


def get_container(request: Request) -> GatewayContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("gateway não inicializado (lifespan não executado)")
    return container


def get_registry(request: Request) -> SessionRegistry:
    return get_container(request).registry


def get_message_service(request: Request) -> MessageService:
    return get_container(request).messages


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return get_container(request).dispatcher
