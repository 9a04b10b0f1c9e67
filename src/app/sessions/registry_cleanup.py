"""Remoção periódica de sessões ociosas.

Remove apenas a sessão em memória; o mapeamento persistido do dispositivo
permanece, permitindo que uma requisição futura recrie e retome a sessão.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from app.sessions.models import Session

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL_SECONDS = 300.0
DEFAULT_INACTIVE_THRESHOLD_SECONDS = 3600.0


def is_evictable(session: Session, threshold_seconds: float, now: datetime) -> bool:
    """Sessão desconectada, ociosa além do limite e sem transição em andamento."""
    if session.connected or session.client.is_connected():
        return False
    if session.lifecycle_lock.locked():
        return False
    return session.idle_seconds(now) > threshold_seconds


def select_evictable(
    sessions: Iterable[Session],
    threshold_seconds: float,
    now: datetime | None = None,
) -> list[str]:
    """Lista user_ids elegíveis para remoção."""
    reference = now or datetime.now(UTC)
    return [s.user_id for s in sessions if is_evictable(s, threshold_seconds, reference)]


async def run_periodic_cleanup(
    sweep: Callable[[float], Awaitable[int]],
    *,
    interval_seconds: float,
    threshold_seconds: float,
) -> None:
    """Loop da varredura; termina apenas por cancelamento."""
    logger.info(
        "session_cleanup_started",
        extra={"interval_seconds": interval_seconds, "threshold_seconds": threshold_seconds},
    )
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await sweep(threshold_seconds)
            except Exception as exc:
                logger.exception(
                    "session_cleanup_sweep_failed",
                    extra={"error_type": type(exc).__name__},
                )
    finally:
        logger.info("session_cleanup_stopped")
