"""Use case de envio de mensagens por tenant.

Todo envio passa pelo RecipientResolver antes de chegar ao adaptador.
Envios não são canceláveis no meio do caminho: completam, expiram
(30s texto, 60s mídia) ou falham.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.observability.metrics import record_latency
from app.protocols.network_client import OutgoingMessage
from app.recipients.phone import mask_address
from utils.errors import (
    ConnectionTimeoutError,
    GatewayError,
    InvalidMessageError,
    SessionNotConnectedError,
    UpstreamUnavailableError,
)

if TYPE_CHECKING:
    from app.recipients.resolver import NumberCheck, RecipientResolver
    from app.sessions.models import Session
    from app.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)

TEXT_SEND_TIMEOUT_SECONDS = 30.0
MEDIA_SEND_TIMEOUT_SECONDS = 60.0
MEDIA_TYPES = frozenset({"image", "video", "audio", "document"})


@dataclass(frozen=True, slots=True)
class SendResult:
    """Resultado de um envio aceito pela rede."""

    message_id: str
    recipient: str
    verified: bool
    timestamp: float


class MessageService:
    """Envio de texto/mídia e verificação de números.

    Args:
        registry: Registry de sessões (fonte da conexão).
        resolver: Resolver de destinatários.
        text_timeout_seconds: Prazo de envio de texto.
        media_timeout_seconds: Prazo de envio de mídia.
    """

    __slots__ = ("_media_timeout", "_registry", "_resolver", "_text_timeout")

    def __init__(
        self,
        registry: SessionRegistry,
        resolver: RecipientResolver,
        *,
        text_timeout_seconds: float = TEXT_SEND_TIMEOUT_SECONDS,
        media_timeout_seconds: float = MEDIA_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._text_timeout = text_timeout_seconds
        self._media_timeout = media_timeout_seconds

    def _connected_session(self, user_id: str) -> Session:
        session = self._registry.require_session(user_id)
        if not session.connected:
            raise SessionNotConnectedError(user_id)
        return session

    async def send_text(self, user_id: str, to: str, text: str) -> SendResult:
        """Envia mensagem de texto.

        Raises:
            SessionNotFoundError / SessionNotConnectedError: Problema do tenant.
            InvalidAddressError / InvalidMessageError: Entrada malformada.
            ConnectionTimeoutError / UpstreamUnavailableError: Falha da rede.
        """
        if not text or not text.strip():
            raise InvalidMessageError("mensagem de texto vazia", user_id=user_id)
        return await self._send(
            user_id,
            to,
            OutgoingMessage(text=text),
            timeout_seconds=self._text_timeout,
            operation="send_text",
        )

    async def send_media(
        self,
        user_id: str,
        to: str,
        media_url: str,
        media_type: str,
        caption: str = "",
    ) -> SendResult:
        """Envia mídia referenciada por URL (download fica com o adaptador)."""
        normalized_type = (media_type or "").strip().lower()
        if normalized_type not in MEDIA_TYPES:
            raise InvalidMessageError(f"tipo de mídia inválido: {media_type}", user_id=user_id)
        if not media_url or not media_url.startswith(("http://", "https://")):
            raise InvalidMessageError("media_url deve ser uma URL http(s)", user_id=user_id)
        return await self._send(
            user_id,
            to,
            OutgoingMessage(media_url=media_url, media_type=normalized_type, caption=caption),
            timeout_seconds=self._media_timeout,
            operation="send_media",
        )

    async def check_number(self, user_id: str, number: str) -> NumberCheck:
        """Verifica se o número existe na rede (falhas da sonda propagam)."""
        self._connected_session(user_id)
        return await self._resolver.check_number(user_id, number)

    async def _send(
        self,
        user_id: str,
        to: str,
        message: OutgoingMessage,
        *,
        timeout_seconds: float,
        operation: str,
    ) -> SendResult:
        session = self._connected_session(user_id)
        recipient = await self._resolver.resolve(user_id, to)

        start = time.perf_counter()
        try:
            receipt = await asyncio.wait_for(
                session.client.send_message(recipient.jid, message),
                timeout=timeout_seconds,
            )
        except TimeoutError as exc:
            raise ConnectionTimeoutError(
                f"tempo esgotado no envio ({timeout_seconds:.0f}s)", user_id=user_id
            ) from exc
        except GatewayError:
            raise
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"falha ao enviar mensagem: {exc}", user_id=user_id
            ) from exc

        session.touch()
        record_latency("message_service", operation, (time.perf_counter() - start) * 1000)
        logger.info(
            "message_sent",
            extra={
                "user_id": user_id,
                "operation": operation,
                "recipient": mask_address(recipient.jid),
                "recipient_verified": recipient.verified,
                "message_id": receipt.message_id,
            },
        )
        return SendResult(
            message_id=receipt.message_id,
            recipient=recipient.jid,
            verified=recipient.verified,
            timestamp=receipt.timestamp,
        )
