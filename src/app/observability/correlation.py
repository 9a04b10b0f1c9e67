"""Correlation_id por requisição HTTP.

O middleware HTTP lê `X-Correlation-ID` (ou gera um UUID), guarda o valor
num ContextVar e o devolve no header da resposta. O filter de logging lê
o mesmo ContextVar, então todo log emitido durante a requisição carrega
o id. Tasks criadas durante a requisição herdam uma cópia do contexto.

Uso:
    token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

CORRELATION_HEADER = "X-Correlation-ID"

# Limite para ids recebidos de clientes (evita logs gigantes)
MAX_CORRELATION_ID_LENGTH = 128

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual ("" fora de requisição)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Valores vazios ou acima do limite são substituídos por um UUID novo.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = (correlation_id or "").strip()
    if not value or len(value) > MAX_CORRELATION_ID_LENGTH:
        value = generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())
