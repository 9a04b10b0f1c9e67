"""Módulo de sessões por tenant.

Exporta o modelo de sessão, o registry e o stream de pareamento.
"""

from app.sessions.models import Session, SessionStatus
from app.sessions.pairing import PairingStream
from app.sessions.registry import DEFAULT_CONNECT_TIMEOUT_SECONDS, SessionRegistry

__all__ = [
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "PairingStream",
    "Session",
    "SessionRegistry",
    "SessionStatus",
]
