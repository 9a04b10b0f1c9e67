"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente pelo coletor de logs (BigQuery, CloudWatch Insights, etc.).

Métricas suportadas:
- Latência: histogram de tempos de execução por componente/operação
- Webhook: counter de entregas por tipo de evento e resultado
- Resolução de destinatário: counter por origem (verificado/fallback)

Uso:
    from app.observability.metrics import record_latency

    start = time.perf_counter()
    # ... operação ...
    latency_ms = (time.perf_counter() - start) * 1000
    record_latency("message_service", "send_text", latency_ms)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "message_service", "session_registry")
        operation: Nome da operação (ex: "send_text", "connect")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
    """
    extra: dict[str, object] = {
        "metric_type": "latency",
        "component": component,
        "operation": operation,
        "latency_ms": round(latency_ms, 2),
    }
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.info("metric_latency", extra=extra)


def record_webhook_delivery(
    event_type: str,
    *,
    success: bool,
    latency_ms: float,
    status_code: int | None = None,
) -> None:
    """Registra resultado de uma entrega ao webhook.

    Args:
        event_type: Tipo do evento entregue (message, connected, test...)
        success: True para resposta 2xx
        latency_ms: Duração do POST em milissegundos
        status_code: Status HTTP (None em erro de transporte)
    """
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "event_type": event_type,
            "success": success,
            "latency_ms": round(latency_ms, 2),
            "status_code": status_code,
        },
    )


def record_recipient_resolution(source: str, verified: bool) -> None:
    """Registra como um destinatário foi resolvido.

    Args:
        source: "special", "jid", "primary", "alternative" ou "fallback"
        verified: True se a existência foi confirmada na rede
    """
    logger.info(
        "metric_recipient_resolution",
        extra={
            "metric_type": "recipient_resolution",
            "source": source,
            "verified": verified,
        },
    )
