"""Composition root: cria e conecta os componentes do gateway.

Todas as instâncias são criadas uma vez por processo (no lifespan da
aplicação) e guardadas num GatewayContainer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.bootstrap.clients import create_async_redis_client
from app.bootstrap.network import load_network_backend
from app.events import EventRouter, normalize_event_kinds, register_webhook_handlers
from app.infra.stores import MemoryDeviceMappingStore, RedisDeviceMappingStore
from app.infra.webhook import WebhookConfig, WebhookDispatcher
from app.recipients import RecipientResolver
from app.sessions import SessionRegistry
from app.use_cases.messages import MessageService
from config.settings import (
    get_base_settings,
    get_session_settings,
    get_webhook_settings,
    get_whatsapp_settings,
)

if TYPE_CHECKING:
    from app.protocols import DeviceMappingStoreProtocol, NetworkBackendProtocol
    from config.settings import (
        BaseSettings,
        SessionSettings,
        WebhookSettings,
        WhatsAppSettings,
    )

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GatewayContainer:
    """Componentes de longa duração do processo."""

    registry: SessionRegistry
    router: EventRouter
    dispatcher: WebhookDispatcher
    resolver: RecipientResolver
    messages: MessageService
    mapping_store: DeviceMappingStoreProtocol
    session_settings: SessionSettings
    redis_client: Any = None

    async def start(self) -> None:
        """Restaura sessões persistidas e inicia a varredura de ociosas."""
        settings = self.session_settings
        restored = await self.registry.init_sessions(
            connect_timeout_seconds=settings.restore_connect_timeout_seconds,
        )
        self.registry.start_periodic_cleanup(
            interval_seconds=settings.cleanup_interval_seconds,
            threshold_seconds=settings.inactive_threshold_seconds,
        )
        logger.info("gateway_started", extra={"restoring_sessions": restored})

    async def shutdown(self) -> None:
        """Desconecta sessões, drena webhooks e fecha clientes."""
        await self.registry.close()
        await self.dispatcher.aclose()
        if self.redis_client is not None:
            await self.redis_client.aclose()
        logger.info("gateway_stopped")


# ──────────────────────────────────────────────────────────────────────────────
# Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_device_mapping_store(
    session_settings: SessionSettings,
    base_settings: BaseSettings,
) -> tuple[DeviceMappingStoreProtocol, Any]:
    """Cria o store do mapeamento conforme DEVICE_STORE_BACKEND.

    Returns:
        (store, cliente redis ou None)
    """
    backend = session_settings.device_store_backend

    if backend == "redis":
        redis_client = create_async_redis_client(base_settings.redis_url)
        logger.info("device_store_created", extra={"backend": "redis"})
        return RedisDeviceMappingStore(redis_client), redis_client

    if backend == "memory":
        if not base_settings.is_development:
            logger.warning(
                "memory_store_in_non_dev",
                extra={"backend": "memory", "environment": base_settings.environment},
            )
        logger.info("device_store_created", extra={"backend": "memory"})
        return MemoryDeviceMappingStore(), None

    msg = f"DEVICE_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


def create_webhook_dispatcher(settings: WebhookSettings) -> WebhookDispatcher:
    """Cria o dispatcher com a configuração inicial vinda do ambiente."""
    config = WebhookConfig(
        url=settings.url,
        events=normalize_event_kinds(list(settings.events)),
        secret=settings.secret,
    )
    return WebhookDispatcher(
        config=config,
        timeout_seconds=settings.timeout_seconds,
        user_agent=settings.user_agent,
        max_connections=settings.max_connections,
        max_idle_connections=settings.max_idle_connections,
        max_pending=settings.max_pending_deliveries,
    )


def create_container(
    backend: NetworkBackendProtocol | None = None,
    *,
    mapping_store: DeviceMappingStoreProtocol | None = None,
    dispatcher: WebhookDispatcher | None = None,
    base_settings: BaseSettings | None = None,
    session_settings: SessionSettings | None = None,
    whatsapp_settings: WhatsAppSettings | None = None,
) -> GatewayContainer:
    """Monta o grafo de componentes.

    Parâmetros omitidos são criados a partir das settings do ambiente;
    testes injetam fakes diretamente.
    """
    base_settings = base_settings or get_base_settings()
    session_settings = session_settings or get_session_settings()
    whatsapp_settings = whatsapp_settings or get_whatsapp_settings()

    if backend is None:
        backend = load_network_backend(whatsapp_settings.client_factory)

    redis_client = None
    if mapping_store is None:
        mapping_store, redis_client = create_device_mapping_store(
            session_settings, base_settings
        )

    if dispatcher is None:
        dispatcher = create_webhook_dispatcher(get_webhook_settings())

    registry = SessionRegistry(
        backend,
        mapping_store,
        connect_timeout_seconds=session_settings.connect_timeout_seconds,
        qr_max_attempts=session_settings.qr_max_attempts,
        qr_retry_backoff_seconds=session_settings.qr_retry_backoff_seconds,
        qr_reconnect_delay_seconds=session_settings.qr_reconnect_delay_seconds,
        pairing_timeout_seconds=session_settings.pairing_timeout_seconds,
    )

    router = EventRouter(registry)
    registry.set_event_callback(router.process_event)
    register_webhook_handlers(router, dispatcher)

    resolver = RecipientResolver(
        registry,
        probe_timeout_seconds=whatsapp_settings.probe_timeout_seconds,
    )
    messages = MessageService(
        registry,
        resolver,
        text_timeout_seconds=whatsapp_settings.text_send_timeout_seconds,
        media_timeout_seconds=whatsapp_settings.media_send_timeout_seconds,
    )

    return GatewayContainer(
        registry=registry,
        router=router,
        dispatcher=dispatcher,
        resolver=resolver,
        messages=messages,
        mapping_store=mapping_store,
        session_settings=session_settings,
        redis_client=redis_client,
    )
