"""Contrato do adaptador da rede de mensageria (colaborador externo).

O gateway não implementa o protocolo da rede: conexão, criptografia,
pareamento e codec de mensagens ficam atrás destes contratos. Uma
implementação concreta é carregada em runtime via
`WHATSAPP_CLIENT_FACTORY` (ver app/bootstrap/network.py).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from app.recipients.jid import JID


# ──────────────────────────────────────────────────────────────────────────────
# Eventos brutos emitidos pelo adaptador
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MessageReceived:
    """Mensagem recebida (metadados + conteúdo já decodificado pelo adaptador)."""

    message_id: str
    sender: str
    chat: str
    timestamp: float
    is_from_me: bool = False
    is_group: bool = False
    push_name: str = ""
    message_type: str = "text"
    content: dict[str, Any] = field(default_factory=dict)
    broadcast_owner: str = ""


@dataclass(frozen=True, slots=True)
class Connected:
    """Conexão estabelecida e autenticada."""


@dataclass(frozen=True, slots=True)
class Disconnected:
    """Conexão encerrada (rede ou local)."""


@dataclass(frozen=True, slots=True)
class PairingCodes:
    """Códigos de pareamento (QR) emitidos durante autenticação."""

    codes: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class LoggedOut:
    """Credencial invalidada pela rede (logout remoto)."""

    reason: str = ""
    on_connect: bool = False


# ──────────────────────────────────────────────────────────────────────────────
# Tipos de suporte
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PairingEvent:
    """Item do canal de pareamento.

    Attributes:
        event: "code" | "success" | "timeout" | "error"
        code: Código QR (apenas para event="code")
        error: Descrição do erro (apenas para event="error")
    """

    event: str
    code: str = ""
    error: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.event != "code"

    def to_dict(self) -> dict[str, str]:
        data = {"event": self.event}
        if self.code:
            data["code"] = self.code
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Resposta da sonda de existência para um número."""

    query: str
    jid: str
    is_in: bool


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    """Conteúdo a enviar (texto ou mídia por URL)."""

    text: str = ""
    media_url: str = ""
    media_type: str = ""
    caption: str = ""


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """Confirmação de envio devolvida pelo adaptador."""

    message_id: str
    timestamp: float


# ──────────────────────────────────────────────────────────────────────────────
# Contratos
# ──────────────────────────────────────────────────────────────────────────────


class DeviceIdentityProtocol(ABC):
    """Credencial persistida à qual uma sessão se vincula."""

    @property
    @abstractmethod
    def jid(self) -> str | None:
        """JID do dispositivo (None enquanto não pareado)."""


class NetworkClientProtocol(ABC):
    """Conexão opaca por conta (uma instância por sessão)."""

    @property
    @abstractmethod
    def device(self) -> DeviceIdentityProtocol: ...

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def disconnect(self) -> None: ...

    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    def is_logged_in(self) -> bool: ...

    @abstractmethod
    async def wait_for_connection(self, timeout: float) -> bool:
        """Aguarda confirmação de conexão; False se o prazo expirar."""

    @abstractmethod
    async def logout(self) -> None: ...

    @abstractmethod
    async def get_qr_channel(self) -> AsyncIterator[PairingEvent]:
        """Canal de pareamento; deve ser obtido antes de conectar."""

    @abstractmethod
    async def send_message(self, to: str, message: OutgoingMessage) -> SendReceipt: ...

    @abstractmethod
    async def is_on_whatsapp(self, phones: list[str]) -> list[ProbeResult]: ...

    @abstractmethod
    def add_event_handler(self, handler: Callable[[object], None]) -> None:
        """Registra callback chamado (no event loop) a cada evento bruto."""


class NetworkBackendProtocol(ABC):
    """Container de dispositivos + fábrica de clientes da rede."""

    @abstractmethod
    def new_device(self) -> DeviceIdentityProtocol:
        """Aloca uma identidade nova (ainda não pareada)."""

    @abstractmethod
    async def get_device(self, jid: JID) -> DeviceIdentityProtocol | None:
        """Carrega identidade persistida; None se não existir."""

    @abstractmethod
    def create_client(self, device: DeviceIdentityProtocol) -> NetworkClientProtocol: ...
