"""Settings do webhook de eventos.

Configuração inicial carregada do ambiente; pode ser substituída em
runtime pela rota de configuração do webhook.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do webhook.

    Attributes:
        url: URL de destino (vazio = webhook desabilitado)
        secret: Segredo para assinatura HMAC (X-Hub-Signature)
        events: Tipos habilitados (vazio = todos)
        timeout_seconds: Timeout de cada entrega
        max_connections: Conexões simultâneas no pool HTTP
        max_idle_connections: Conexões ociosas mantidas no pool
        user_agent: Valor fixo do header User-Agent
        max_pending_deliveries: Entregas simultâneas em background
    """

    url: str = ""
    secret: str = ""
    events: tuple[str, ...] = ()
    timeout_seconds: float = 10.0
    max_connections: int = 10
    max_idle_connections: int = 5
    user_agent: str = "wa-gateway/1.0"
    max_pending_deliveries: int = 100

    def validate(self) -> list[str]:
        """Valida configurações do webhook.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.url and not self.url.startswith(("http://", "https://")):
            errors.append("WEBHOOK_URL deve começar com http:// ou https://")

        if self.timeout_seconds <= 0:
            errors.append("WEBHOOK_TIMEOUT_SECONDS deve ser > 0")

        if self.max_idle_connections > self.max_connections:
            errors.append("WEBHOOK_MAX_IDLE_CONNECTIONS deve ser <= WEBHOOK_MAX_CONNECTIONS")

        if self.max_pending_deliveries < 1:
            errors.append("WEBHOOK_MAX_PENDING_DELIVERIES deve ser >= 1")

        return errors


def _parse_events(raw: str) -> tuple[str, ...]:
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def _load_webhook_from_env() -> WebhookSettings:
    """Carrega WebhookSettings de variáveis de ambiente."""
    return WebhookSettings(
        url=os.getenv("WEBHOOK_URL", "").strip(),
        secret=os.getenv("WEBHOOK_SECRET", ""),
        events=_parse_events(os.getenv("WEBHOOK_EVENTS", "")),
        timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
        max_connections=int(os.getenv("WEBHOOK_MAX_CONNECTIONS", "10")),
        max_idle_connections=int(os.getenv("WEBHOOK_MAX_IDLE_CONNECTIONS", "5")),
        user_agent=os.getenv("WEBHOOK_USER_AGENT", "wa-gateway/1.0"),
        max_pending_deliveries=int(os.getenv("WEBHOOK_MAX_PENDING_DELIVERIES", "100")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_webhook_from_env()
