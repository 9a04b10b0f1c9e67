"""Entrega de eventos ao webhook externo."""

from app.infra.webhook.dispatcher import (
    WebhookConfig,
    WebhookDeliveryError,
    WebhookDispatcher,
    WebhookHealth,
    WebhookStatus,
)
from app.infra.webhook.signature import compute_signature, verify_signature

__all__ = [
    "WebhookConfig",
    "WebhookDeliveryError",
    "WebhookDispatcher",
    "WebhookHealth",
    "WebhookStatus",
    "compute_signature",
    "verify_signature",
]
