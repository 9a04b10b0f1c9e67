"""Recarregamento de sessões persistidas no startup do processo."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from utils.errors import GatewayError

if TYPE_CHECKING:
    from app.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_RESTORE_CONNECT_TIMEOUT_SECONDS = 30.0


async def reconnect_restored_session(
    registry: SessionRegistry,
    user_id: str,
    timeout_seconds: float,
) -> None:
    """Reconecta uma sessão recarregada (executa em task independente)."""
    try:
        await registry.connect(user_id, timeout_seconds=timeout_seconds)
    except GatewayError as exc:
        logger.warning(
            "session_restore_connect_failed",
            extra={"user_id": user_id, "error_type": type(exc).__name__, "error": exc.message},
        )
        return
    logger.info("session_restore_connected", extra={"user_id": user_id})


async def restore_sessions(
    registry: SessionRegistry,
    mappings: dict[str, str],
    *,
    connect_timeout_seconds: float = DEFAULT_RESTORE_CONNECT_TIMEOUT_SECONDS,
) -> int:
    """Cria uma sessão por mapeamento e agenda a reconexão de cada uma.

    Falha em um mapeamento é registrada e não bloqueia os demais.
    Identidades inválidas ou ausentes são descartadas pelo próprio
    create_session (mapeamento removido, dispositivo novo alocado).

    Returns:
        Quantidade de sessões autenticadas cuja reconexão foi agendada.
    """
    scheduled = 0
    for user_id in mappings:
        try:
            session = await registry.create_session(user_id)
        except GatewayError as exc:
            logger.error(
                "session_restore_create_failed",
                extra={"user_id": user_id, "error_type": type(exc).__name__},
            )
            continue

        if not session.has_credentials:
            logger.warning("session_restore_not_authenticated", extra={"user_id": user_id})
            continue

        registry.spawn(
            reconnect_restored_session(registry, user_id, connect_timeout_seconds),
            label=f"restore:{user_id}",
        )
        scheduled += 1

    logger.info(
        "session_restore_completed",
        extra={"mappings": len(mappings), "reconnects_scheduled": scheduled},
    )
    return scheduled
