"""Settings específicas da rede WhatsApp.

O gateway não fala o protocolo da rede: a implementação do cliente é
carregada a partir de `WHATSAPP_CLIENT_FACTORY` (formato
`pacote.modulo:callable`), que deve devolver um NetworkBackendProtocol.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class WhatsAppSettings:
    """Configurações da rede WhatsApp.

    Attributes:
        client_factory: Caminho `modulo:callable` do backend da rede
        text_send_timeout_seconds: Prazo de envio de texto
        media_send_timeout_seconds: Prazo de envio de mídia
        probe_timeout_seconds: Prazo da sonda de existência de número
    """

    client_factory: str = ""
    text_send_timeout_seconds: float = 30.0
    media_send_timeout_seconds: float = 60.0
    probe_timeout_seconds: float = 10.0

    def validate(self) -> list[str]:
        """Valida configurações mínimas da rede.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.client_factory:
            errors.append("WHATSAPP_CLIENT_FACTORY não configurado")
        elif ":" not in self.client_factory:
            errors.append("WHATSAPP_CLIENT_FACTORY deve ter o formato modulo:callable")

        if self.text_send_timeout_seconds <= 0:
            errors.append("WHATSAPP_TEXT_SEND_TIMEOUT_SECONDS deve ser > 0")

        if self.media_send_timeout_seconds <= 0:
            errors.append("WHATSAPP_MEDIA_SEND_TIMEOUT_SECONDS deve ser > 0")

        if self.probe_timeout_seconds <= 0:
            errors.append("WHATSAPP_PROBE_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_whatsapp_from_env() -> WhatsAppSettings:
    """Carrega WhatsAppSettings de variáveis de ambiente."""
    return WhatsAppSettings(
        client_factory=os.getenv("WHATSAPP_CLIENT_FACTORY", "").strip(),
        text_send_timeout_seconds=float(os.getenv("WHATSAPP_TEXT_SEND_TIMEOUT_SECONDS", "30")),
        media_send_timeout_seconds=float(os.getenv("WHATSAPP_MEDIA_SEND_TIMEOUT_SECONDS", "60")),
        probe_timeout_seconds=float(os.getenv("WHATSAPP_PROBE_TIMEOUT_SECONDS", "10")),
    )


@lru_cache(maxsize=1)
def get_whatsapp_settings() -> WhatsAppSettings:
    """Retorna instância cacheada de WhatsAppSettings."""
    return _load_whatsapp_from_env()
