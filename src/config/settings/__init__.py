"""Agregador de settings do gateway.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    DeviceStoreBackend,
    Environment,
    SessionSettings,
    get_base_settings,
    get_session_settings,
)

# Webhook settings
from config.settings.webhook import WebhookSettings, get_webhook_settings

# Rede WhatsApp
from config.settings.whatsapp import WhatsAppSettings, get_whatsapp_settings

__all__ = [
    # Base
    "BaseSettings",
    "DeviceStoreBackend",
    "Environment",
    "SessionSettings",
    # Webhook
    "WebhookSettings",
    # Rede
    "WhatsAppSettings",
    "get_base_settings",
    "get_session_settings",
    "get_webhook_settings",
    "get_whatsapp_settings",
]
