"""Dispatcher de eventos para o webhook externo.

Entrega at-most-once e sem retry: cada evento vira um POST assinado numa
task em background. Falhas nunca voltam ao produtor do evento; ficam
registradas apenas na saúde do webhook (WebhookHealth).

A configuração é um snapshot imutável trocado por inteiro, então um
dispatch lê URL, tipos habilitados e segredo de forma consistente mesmo
durante uma reconfiguração.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from app.events.models import EventKind
from app.infra.tasks import BackgroundTasks
from app.infra.webhook.signature import SIGNATURE_HEADER, compute_signature
from app.observability.metrics import record_webhook_delivery
from utils.errors import ConfigurationProbeFailedError, WebhookNotConfiguredError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_CONNECTIONS = 10
DEFAULT_MAX_IDLE_CONNECTIONS = 5
DEFAULT_IDLE_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "wa-gateway/1.0"
EVENT_HEADER = "X-WhatsApp-Event"
TEST_MESSAGE = "Teste de conexão"


class WebhookDeliveryError(Exception):
    """Falha de entrega (status não-2xx ou erro de transporte)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class WebhookConfig:
    """Snapshot da configuração (conjunto vazio = todos os tipos habilitados)."""

    url: str = ""
    events: frozenset[str] = frozenset()
    secret: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def is_event_enabled(self, kind: str) -> bool:
        return not self.events or kind in self.events


@dataclass(slots=True)
class WebhookHealth:
    """Estado observado após cada tentativa de entrega."""

    connected: bool = False
    last_error: str = ""
    last_success: datetime | None = None


@dataclass(frozen=True, slots=True)
class WebhookStatus:
    url: str
    enabled_events: list[str] = field(default_factory=list)
    connected: bool = False
    last_error: str = ""
    last_success: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "enabled_events": self.enabled_events,
            "connected": self.connected,
            "last_error": self.last_error,
            "last_success": self.last_success,
        }


def format_timestamp(moment: datetime) -> str:
    """RFC3339 em UTC com sufixo Z."""
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_envelope(user_id: str, kind: str, payload: dict[str, Any]) -> bytes:
    """Serializa o envelope `{user_id, event_type, timestamp, data}` uma única vez."""
    envelope = {
        "user_id": user_id,
        "event_type": kind,
        "timestamp": format_timestamp(datetime.now(UTC)),
        "data": payload,
    }
    return json.dumps(envelope, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class WebhookDispatcher:
    """Entrega eventos ao webhook configurado, rastreando saúde.

    Args:
        client: Cliente httpx compartilhado (criado com pool limitado se omitido).
        config: Configuração inicial (ex: vinda de env vars).
        timeout_seconds: Timeout de cada POST.
        user_agent: Valor fixo do header User-Agent.
        max_pending: Máximo de entregas simultâneas em background.
    """

    __slots__ = (
        "_client",
        "_config",
        "_config_lock",
        "_health",
        "_owns_client",
        "_tasks",
        "_timeout",
        "_user_agent",
    )

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        config: WebhookConfig | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_idle_connections: int = DEFAULT_MAX_IDLE_CONNECTIONS,
        max_pending: int = 100,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_idle_connections,
                keepalive_expiry=DEFAULT_IDLE_TIMEOUT_SECONDS,
            ),
        )
        self._config = config or WebhookConfig()
        self._config_lock = asyncio.Lock()
        self._health = WebhookHealth()
        self._timeout = timeout_seconds
        self._user_agent = user_agent
        self._tasks = BackgroundTasks("webhook_dispatcher", max_concurrency=max_pending)

    @property
    def config(self) -> WebhookConfig:
        return self._config

    @property
    def pending_deliveries(self) -> int:
        return self._tasks.active_count

    # ──────────────────────────────────────────────────────────────────────
    # Dispatch
    # ──────────────────────────────────────────────────────────────────────

    def dispatch_event(self, user_id: str, kind: EventKind | str, payload: dict[str, Any]) -> bool:
        """Agenda a entrega do evento e retorna imediatamente.

        No-op (não é erro) sem URL configurada ou com o tipo desabilitado.

        Returns:
            True se a entrega foi agendada.
        """
        config = self._config
        event_type = str(kind)
        if not config.is_configured or not config.is_event_enabled(event_type):
            return False

        body = build_envelope(user_id, event_type, payload)
        headers = self._build_headers(config, event_type, body)
        self._tasks.spawn(
            self._deliver_quietly(config.url, body, headers, event_type),
            label=f"deliver:{event_type}",
        )
        return True

    def _build_headers(self, config: WebhookConfig, event_type: str, body: bytes) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
            EVENT_HEADER: event_type,
        }
        if config.secret:
            headers[SIGNATURE_HEADER] = compute_signature(body, config.secret)
        return headers

    async def _deliver_quietly(
        self, url: str, body: bytes, headers: dict[str, str], event_type: str
    ) -> None:
        with contextlib.suppress(WebhookDeliveryError):
            await self._deliver(url, body, headers, event_type)

    async def _deliver(self, url: str, body: bytes, headers: dict[str, str], event_type: str) -> None:
        """POST único; atualiza saúde e levanta WebhookDeliveryError em falha."""
        start = time.perf_counter()
        try:
            response = await self._client.post(
                url, content=body, headers=headers, timeout=self._timeout
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            error = f"falha ao enviar webhook: {type(exc).__name__}: {exc}"
            self._record_failure(error, event_type, start)
            raise WebhookDeliveryError(error) from exc

        if not response.is_success:
            error = f"status HTTP inesperado: {response.status_code}"
            self._record_failure(error, event_type, start, response.status_code)
            raise WebhookDeliveryError(error, status_code=response.status_code)

        self._health.connected = True
        self._health.last_error = ""
        self._health.last_success = datetime.now(UTC)
        record_webhook_delivery(
            event_type,
            success=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            status_code=response.status_code,
        )

    def _record_failure(
        self,
        error: str,
        event_type: str,
        start: float,
        status_code: int | None = None,
    ) -> None:
        self._health.connected = False
        self._health.last_error = error
        logger.warning(
            "webhook_delivery_failed",
            extra={"event_type": event_type, "status_code": status_code, "error": error},
        )
        record_webhook_delivery(
            event_type,
            success=False,
            latency_ms=(time.perf_counter() - start) * 1000,
            status_code=status_code,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Configuração e status
    # ──────────────────────────────────────────────────────────────────────

    async def configure(
        self,
        url: str,
        events: Iterable[str] = (),
        secret: str = "",
    ) -> WebhookStatus:
        """Aplica nova configuração e valida com uma entrega de teste.

        A configuração permanece aplicada mesmo se o teste falhar.

        Raises:
            ConfigurationProbeFailedError: Entrega de teste falhou.
        """
        async with self._config_lock:
            self._config = WebhookConfig(url=url.strip(), events=frozenset(events), secret=secret)
            logger.info(
                "webhook_configured",
                extra={
                    "enabled_events": sorted(self._config.events),
                    "has_secret": bool(secret),
                },
            )
            await self._probe(self._config)
        return self.get_status()

    async def send_test(self) -> WebhookStatus:
        """Entrega de teste manual (ignora o filtro de tipos habilitados).

        Raises:
            WebhookNotConfiguredError: Nenhuma URL configurada.
            ConfigurationProbeFailedError: Entrega de teste falhou.
        """
        config = self._config
        if not config.is_configured:
            raise WebhookNotConfiguredError()
        await self._probe(config)
        return self.get_status()

    async def _probe(self, config: WebhookConfig) -> None:
        if not config.is_configured:
            return
        event_type = EventKind.TEST.value
        body = build_envelope("", event_type, {"message": TEST_MESSAGE})
        headers = self._build_headers(config, event_type, body)
        try:
            await self._deliver(config.url, body, headers, event_type)
        except WebhookDeliveryError as exc:
            raise ConfigurationProbeFailedError(
                f"falha no teste de conexão do webhook: {exc}"
            ) from exc

    def get_status(self) -> WebhookStatus:
        config = self._config
        health = self._health
        return WebhookStatus(
            url=config.url,
            enabled_events=sorted(config.events),
            connected=health.connected,
            last_error=health.last_error,
            last_success=format_timestamp(health.last_success) if health.last_success else None,
        )

    async def aclose(self, drain_timeout_seconds: float = 10.0) -> None:
        """Drena entregas pendentes e fecha o cliente HTTP (se próprio)."""
        await self._tasks.drain(drain_timeout_seconds)
        if self._owns_client:
            await self._client.aclose()
