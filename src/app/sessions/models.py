"""Modelo de sessão por tenant.

Uma sessão associa um account handle (user_id) a uma conexão com a rede,
viva ou dormente. O cliente pertence exclusivamente à sessão; outros
componentes o acessam apenas através do SessionRegistry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.protocols.network_client import NetworkClientProtocol


class SessionStatus(Enum):
    """Estado observável da sessão."""

    CONNECTED = "connected"
    AUTHENTICATED_DISCONNECTED = "authenticated_disconnected"
    NOT_AUTHENTICATED = "not_authenticated"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, eq=False)
class Session:
    """Sessão de um tenant.

    Atributos:
        user_id: Account handle (chave do registry)
        client: Conexão com a rede (exclusiva da sessão)
        connected: Última confirmação de conexão observada
        created_at: Momento de criação
        last_active: Última atividade (evento, envio ou transição)
        lifecycle_lock: Serializa connect/disconnect/reset/pareamento
    """

    user_id: str
    client: NetworkClientProtocol
    connected: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    last_active: datetime = field(default_factory=_utcnow)
    lifecycle_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def device_jid(self) -> str | None:
        return self.client.device.jid

    @property
    def has_credentials(self) -> bool:
        """True se o dispositivo já foi pareado (JID vinculado)."""
        return self.device_jid is not None

    @property
    def phone_number(self) -> str | None:
        """Parte numérica do JID do dispositivo (sem agente/dispositivo)."""
        jid = self.device_jid
        if not jid:
            return None
        user = jid.split("@", 1)[0]
        return user.split(":", 1)[0].split(".", 1)[0]

    @property
    def status(self) -> SessionStatus:
        if self.connected:
            return SessionStatus.CONNECTED
        if self.has_credentials:
            return SessionStatus.AUTHENTICATED_DISCONNECTED
        return SessionStatus.NOT_AUTHENTICATED

    def touch(self) -> None:
        """Atualiza last_active para agora."""
        self.last_active = _utcnow()

    def idle_seconds(self, now: datetime | None = None) -> float:
        reference = now or _utcnow()
        return (reference - self.last_active).total_seconds()

    def to_status_dict(self) -> dict[str, Any]:
        """Serializa estado para a superfície de status."""
        return {
            "user_id": self.user_id,
            "status": self.status.value,
            "connected": self.connected,
            "logged_in": self.client.is_logged_in(),
            "phone_number": self.phone_number,
            "created_at": self.created_at.isoformat(),
            "last_active": self.last_active.isoformat(),
        }
