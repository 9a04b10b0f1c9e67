"""Endereços estruturados da rede (JID).

Formato: `usuario[.agente][:dispositivo]@servidor`.
Apenas validação estrutural; existência na rede é responsabilidade
do resolver (sonda via adaptador).
"""

from __future__ import annotations

from dataclasses import dataclass

from utils.errors import InvalidAddressError

USER_SERVER = "s.whatsapp.net"
LEGACY_USER_SERVER = "c.us"
GROUP_SERVER = "g.us"
BROADCAST_SERVER = "broadcast"
NEWSLETTER_SERVER = "newsletter"
HIDDEN_USER_SERVER = "lid"

# Servidores cujos endereços dispensam heurística de telefone
SPECIAL_SERVERS = frozenset(
    {GROUP_SERVER, BROADCAST_SERVER, NEWSLETTER_SERVER, HIDDEN_USER_SERVER}
)

KNOWN_SERVERS = frozenset(
    {USER_SERVER, LEGACY_USER_SERVER, *SPECIAL_SERVERS, "hosted", "msgr", "bot"}
)

# Servidores cujo user é numérico (telefone ou id oculto)
_NUMERIC_USER_SERVERS = frozenset({USER_SERVER, LEGACY_USER_SERVER, HIDDEN_USER_SERVER})


@dataclass(frozen=True, slots=True)
class JID:
    """Endereço da rede já decomposto."""

    user: str
    server: str
    agent: int = 0
    device: int = 0

    @property
    def is_special(self) -> bool:
        """True para grupo, canal, lista de transmissão ou id oculto."""
        return self.server in SPECIAL_SERVERS

    def __str__(self) -> str:
        user = self.user
        if self.agent:
            user = f"{user}.{self.agent}"
        if self.device:
            user = f"{user}:{self.device}"
        return f"{user}@{self.server}"


def has_special_suffix(address: str) -> bool:
    """Indica se o endereço termina em um dos domínios especiais."""
    return any(address.endswith(f"@{server}") for server in SPECIAL_SERVERS)


def _parse_int(value: str, field_name: str, raw: str) -> int:
    if not value.isdigit():
        raise InvalidAddressError(f"JID inválido ({field_name}): {raw}")
    return int(value)


def parse_jid(raw: str) -> JID:
    """Valida e decompõe um endereço `usuario@servidor`.

    Args:
        raw: Endereço completo (sem espaços nas bordas).

    Returns:
        JID decomposto.

    Raises:
        InvalidAddressError: Estrutura inválida ou servidor desconhecido.
    """
    if raw.count("@") != 1:
        raise InvalidAddressError(f"JID inválido: {raw}")

    user_part, server = raw.split("@")
    if not user_part or not server:
        raise InvalidAddressError(f"JID inválido: {raw}")
    if server not in KNOWN_SERVERS:
        raise InvalidAddressError(f"servidor de JID desconhecido: {server}")
    if any(ch.isspace() for ch in raw):
        raise InvalidAddressError(f"JID inválido: {raw}")

    agent = 0
    device = 0
    user = user_part
    if ":" in user:
        user, device_str = user.split(":", 1)
        device = _parse_int(device_str, "device", raw)
    if "." in user and server in _NUMERIC_USER_SERVERS:
        user, agent_str = user.split(".", 1)
        agent = _parse_int(agent_str, "agent", raw)

    if not user:
        raise InvalidAddressError(f"JID inválido: {raw}")
    if server in _NUMERIC_USER_SERVERS and not user.isdigit():
        raise InvalidAddressError(f"JID inválido (usuário não numérico): {raw}")

    return JID(user=user, server=server, agent=agent, device=device)


def user_jid(number: str) -> str:
    """Monta o endereço de usuário a partir de dígitos já canônicos."""
    return f"{number}@{USER_SERVER}"
