"""Resolver de destinatários.

Transforma o campo "to" digitado por humanos em endereço canônico da
rede, combinando normalização de formato com sonda de existência:

    1. Domínio especial (grupo, canal, transmissão, id oculto)
       → apenas validação estrutural
    2. Telefone (dígitos + separadores, ≥10 dígitos)
       → limpa, augmenta código do país, sonda primário e alternativas
    3. Endereço com "@" → validação estrutural
    4. Qualquer outra coisa → InvalidAddressError

Se nenhuma hipótese existir (ou a sonda falhar), o envio não é
bloqueado: devolve o candidato primário marcado como não verificado.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.observability.metrics import record_recipient_resolution
from app.recipients.jid import user_jid
from app.recipients.phone import (
    alternative_candidates,
    classify_recipient,
    is_phone_number,
    mask_address,
    primary_candidate,
)
from config.logging import log_fallback
from utils.errors import (
    InvalidAddressError,
    SessionError,
    SessionNotConnectedError,
    UpstreamUnavailableError,
)

if TYPE_CHECKING:
    from app.protocols.network_client import ProbeResult
    from app.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ResolvedRecipient:
    """Endereço canônico resolvido.

    Attributes:
        jid: Endereço pronto para envio
        verified: True se a existência foi confirmada na rede (ou se é
            endereço estruturado que dispensa sonda)
        source: special | jid | primary | alternative | fallback
    """

    jid: str
    verified: bool
    source: str


@dataclass(frozen=True, slots=True)
class NumberCheck:
    """Resultado da verificação explícita de um número."""

    query: str
    exists: bool
    jid: str | None = None


class RecipientResolver:
    """Resolve destinatários usando a sessão do tenant para sondar a rede.

    Args:
        registry: Registry de sessões (fonte da conexão usada na sonda).
        probe_timeout_seconds: Prazo de cada sonda de existência.
    """

    __slots__ = ("_probe_timeout", "_registry")

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    ) -> None:
        self._registry = registry
        self._probe_timeout = probe_timeout_seconds

    async def resolve(self, user_id: str, to: str) -> ResolvedRecipient:
        """Resolve o destinatário de um envio.

        Args:
            user_id: Account handle cuja conexão será usada na sonda.
            to: Campo "to" como recebido.

        Returns:
            ResolvedRecipient (nunca falha por sonda indisponível).

        Raises:
            InvalidAddressError: Entrada vazia, ambígua ou estruturalmente inválida.
        """
        kind, address = classify_recipient(to)
        if kind == "phone":
            return await self._resolve_phone(user_id, address)
        return self._done(ResolvedRecipient(jid=address, verified=True, source=kind))

    async def _resolve_phone(self, user_id: str, raw: str) -> ResolvedRecipient:
        primary = primary_candidate(raw)

        try:
            found = await self._probe(user_id, primary)
        except (SessionError, UpstreamUnavailableError) as exc:
            logger.debug(
                "recipient_probe_failed",
                extra={"user_id": user_id, "error_type": type(exc).__name__},
            )
            found = None
        if found:
            return self._done(ResolvedRecipient(jid=found, verified=True, source="primary"))

        for candidate in alternative_candidates(primary):
            try:
                found = await self._probe(user_id, candidate)
            except (SessionError, UpstreamUnavailableError):
                continue
            if found:
                logger.info(
                    "recipient_alternative_matched",
                    extra={"user_id": user_id, "recipient": mask_address(candidate)},
                )
                return self._done(
                    ResolvedRecipient(jid=found, verified=True, source="alternative")
                )

        log_fallback(logger, "recipient_resolver", reason="existence_not_confirmed")
        return self._done(
            ResolvedRecipient(jid=user_jid(primary), verified=False, source="fallback")
        )

    @staticmethod
    def _done(result: ResolvedRecipient) -> ResolvedRecipient:
        record_recipient_resolution(result.source, result.verified)
        return result

    async def _probe(self, user_id: str, number: str) -> str | None:
        """Sonda de existência; devolve o JID canônico da rede se existir.

        Raises:
            SessionNotFoundError: Handle sem sessão.
            SessionNotConnectedError: Sessão desconectada.
            UpstreamUnavailableError: Adaptador falhou ou excedeu o prazo.
        """
        session = self._registry.require_session(user_id)
        if not session.connected:
            raise SessionNotConnectedError(user_id)

        try:
            results: list[ProbeResult] = await asyncio.wait_for(
                session.client.is_on_whatsapp([f"+{number}"]),
                timeout=self._probe_timeout,
            )
        except TimeoutError as exc:
            raise UpstreamUnavailableError(
                "tempo esgotado na verificação do número", user_id=user_id
            ) from exc
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"falha ao verificar número: {exc}", user_id=user_id
            ) from exc

        if not results or not results[0].is_in:
            return None
        return results[0].jid or user_jid(number)

    async def check_number(self, user_id: str, number: str) -> NumberCheck:
        """Verifica explicitamente se um telefone existe na rede.

        Diferente de `resolve`, falhas da sonda são propagadas.

        Raises:
            InvalidAddressError: Entrada não é telefone plausível.
            SessionNotFoundError / SessionNotConnectedError / UpstreamUnavailableError
        """
        if not is_phone_number(number or ""):
            raise InvalidAddressError(f"número inválido: {mask_address(number or '')}")
        primary = primary_candidate(number)
        for candidate in (primary, *alternative_candidates(primary)):
            found = await self._probe(user_id, candidate)
            if found:
                return NumberCheck(query=candidate, exists=True, jid=found)
        return NumberCheck(query=primary, exists=False)
