"""Settings do registry de sessões.

Timeouts de conexão/pareamento, varredura de ociosas e backend do
mapeamento persistido de dispositivos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

DeviceStoreBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class SessionSettings:
    """Configurações de sessão.

    Attributes:
        connect_timeout_seconds: Espera por confirmação em connect()
        restore_connect_timeout_seconds: Espera por sessão no startup
        qr_max_attempts: Tentativas de conexão durante pareamento
        qr_retry_backoff_seconds: Pausa entre tentativas de pareamento
        qr_reconnect_delay_seconds: Pausa após desconectar antes de parear
        pairing_timeout_seconds: Prazo total do stream de QR
        cleanup_interval_seconds: Intervalo da varredura de ociosas
        inactive_threshold_seconds: Ociosidade mínima para remoção
        device_store_backend: Backend do mapeamento user_id → dispositivo
    """

    connect_timeout_seconds: float = 10.0
    restore_connect_timeout_seconds: float = 30.0
    qr_max_attempts: int = 3
    qr_retry_backoff_seconds: float = 2.0
    qr_reconnect_delay_seconds: float = 1.0
    pairing_timeout_seconds: float = 120.0
    cleanup_interval_seconds: float = 300.0  # 5 min
    inactive_threshold_seconds: float = 3600.0  # 1h
    device_store_backend: DeviceStoreBackend = "memory"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de sessão.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.connect_timeout_seconds <= 0:
            errors.append("SESSION_CONNECT_TIMEOUT_SECONDS deve ser > 0")

        if self.restore_connect_timeout_seconds <= 0:
            errors.append("SESSION_RESTORE_CONNECT_TIMEOUT_SECONDS deve ser > 0")

        if self.qr_max_attempts < 1:
            errors.append("SESSION_QR_MAX_ATTEMPTS deve ser >= 1")

        if self.qr_reconnect_delay_seconds < 0:
            errors.append("SESSION_QR_RECONNECT_DELAY_SECONDS deve ser >= 0")

        if self.pairing_timeout_seconds <= 0:
            errors.append("SESSION_PAIRING_TIMEOUT_SECONDS deve ser > 0")

        if self.cleanup_interval_seconds <= 0:
            errors.append("SESSION_CLEANUP_INTERVAL_SECONDS deve ser > 0")

        if self.inactive_threshold_seconds <= 0:
            errors.append("SESSION_INACTIVE_THRESHOLD_SECONDS deve ser > 0")

        if self.device_store_backend not in ("memory", "redis"):
            errors.append(f"DEVICE_STORE_BACKEND inválido: {self.device_store_backend}")

        if self.device_store_backend == "memory" and not base.is_development:
            errors.append("DEVICE_STORE_BACKEND=memory proibido em staging/production")

        if self.device_store_backend == "redis" and not base.redis_url:
            errors.append("DEVICE_STORE_BACKEND=redis requer REDIS_URL")

        return errors


def _load_session_from_env() -> SessionSettings:
    """Carrega SessionSettings de variáveis de ambiente."""
    backend_str = os.getenv("DEVICE_STORE_BACKEND", "memory").lower()
    backend: DeviceStoreBackend = "redis" if backend_str == "redis" else "memory"
    return SessionSettings(
        connect_timeout_seconds=float(os.getenv("SESSION_CONNECT_TIMEOUT_SECONDS", "10")),
        restore_connect_timeout_seconds=float(
            os.getenv("SESSION_RESTORE_CONNECT_TIMEOUT_SECONDS", "30")
        ),
        qr_max_attempts=int(os.getenv("SESSION_QR_MAX_ATTEMPTS", "3")),
        qr_retry_backoff_seconds=float(os.getenv("SESSION_QR_RETRY_BACKOFF_SECONDS", "2")),
        qr_reconnect_delay_seconds=float(
            os.getenv("SESSION_QR_RECONNECT_DELAY_SECONDS", "1")
        ),
        pairing_timeout_seconds=float(os.getenv("SESSION_PAIRING_TIMEOUT_SECONDS", "120")),
        cleanup_interval_seconds=float(os.getenv("SESSION_CLEANUP_INTERVAL_SECONDS", "300")),
        inactive_threshold_seconds=float(
            os.getenv("SESSION_INACTIVE_THRESHOLD_SECONDS", "3600")
        ),
        device_store_backend=backend,
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """Retorna instância cacheada de SessionSettings."""
    return _load_session_from_env()
