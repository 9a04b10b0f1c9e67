"""Stream de pareamento (QR) com conexão dirigida em background.

O stream é finito: termina em success/error/timeout do adaptador, ao
esgotar o prazo de pareamento ou quando o consumidor o fecha. O prazo
vale mesmo se o consumidor abandonar o stream sem fechá-lo. Em todos
os casos, exceto sucesso, a task de conexão com retries é cancelada.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from app.protocols.network_client import PairingEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from app.sessions.models import Session

logger = logging.getLogger(__name__)

DEFAULT_PAIRING_TIMEOUT_SECONDS = 120.0


async def connect_with_retries(
    session: Session,
    *,
    max_attempts: int,
    backoff_seconds: float,
) -> bool:
    """Tenta conectar a sessão até `max_attempts` vezes.

    Cada tentativa ocorre sob o lock de ciclo de vida da sessão.

    Returns:
        True se alguma tentativa conectou (ou a sessão já estava conectada).
    """
    for attempt in range(1, max_attempts + 1):
        async with session.lifecycle_lock:
            if session.client.is_connected():
                return True
            try:
                await session.client.connect()
            except Exception as exc:
                logger.warning(
                    "pairing_connect_attempt_failed",
                    extra={
                        "user_id": session.user_id,
                        "attempt": attempt,
                        "max_attempts": max_attempts,
                        "error_type": type(exc).__name__,
                    },
                )
            else:
                logger.info(
                    "pairing_connect_started",
                    extra={"user_id": session.user_id, "attempt": attempt},
                )
                return True
        if attempt < max_attempts:
            await asyncio.sleep(backoff_seconds)

    logger.error(
        "pairing_connect_exhausted",
        extra={"user_id": session.user_id, "max_attempts": max_attempts},
    )
    return False


class PairingStream:
    """Iterador assíncrono de PairingEvent com prazo e cancelamento.

    Args:
        user_id: Account handle em pareamento.
        channel: Canal bruto devolvido pelo adaptador.
        driver: Task que dirige a conexão (cancelada ao encerrar sem sucesso).
        timeout_seconds: Prazo total do pareamento.
    """

    def __init__(
        self,
        user_id: str,
        channel: AsyncIterator[PairingEvent],
        driver: asyncio.Task[Any],
        timeout_seconds: float = DEFAULT_PAIRING_TIMEOUT_SECONDS,
    ) -> None:
        self.user_id = user_id
        self._channel = channel
        self._driver = driver
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + timeout_seconds
        self._finished = False
        self._succeeded = False
        self._reading = False
        self._expiry: asyncio.Task[None] | None = None
        self._watchdog = loop.call_later(timeout_seconds, self._expire)

    @property
    def closed(self) -> bool:
        return self._finished

    def __aiter__(self) -> PairingStream:
        return self

    async def __anext__(self) -> PairingEvent:
        if self._finished:
            raise StopAsyncIteration

        remaining = self._deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            await self.aclose()
            return PairingEvent(event="timeout")

        self._reading = True
        try:
            item = await asyncio.wait_for(anext(self._channel), timeout=remaining)
        except StopAsyncIteration:
            await self.aclose()
            raise
        except TimeoutError:
            logger.info("pairing_timeout", extra={"user_id": self.user_id})
            await self.aclose()
            return PairingEvent(event="timeout")
        finally:
            self._reading = False

        if item.is_terminal:
            self._succeeded = item.event == "success"
            logger.info(
                "pairing_finished",
                extra={"user_id": self.user_id, "pairing_event": item.event},
            )
            await self.aclose()
        return item

    def _expire(self) -> None:
        # Leitor ativo encerra pelo wait_for de __anext__
        if self._finished or self._reading:
            return
        logger.info("pairing_timeout", extra={"user_id": self.user_id, "abandoned": True})
        self._expiry = asyncio.get_running_loop().create_task(self.aclose())

    async def aclose(self) -> None:
        """Encerra o stream; cancela a conexão dirigida se não houve sucesso."""
        if self._finished:
            return
        self._finished = True
        self._watchdog.cancel()

        if not self._succeeded and not self._driver.done():
            self._driver.cancel()
            logger.info("pairing_driver_cancelled", extra={"user_id": self.user_id})

        close = getattr(self._channel, "aclose", None)
        if close is not None:
            await close()
