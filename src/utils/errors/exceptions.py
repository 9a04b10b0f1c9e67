"""Exceções de domínio do gateway.

Três famílias distinguíveis pelo chamador (campo `category`):
- session: problema do tenant/sessão (não existe, já autenticada, desconectada)
- input: entrada malformada (endereço inválido)
- upstream: falha da rede/adaptador (indisponível, timeout)

`configuration` cobre a sonda de conectividade do webhook.
"""

from __future__ import annotations


class GatewayError(RuntimeError):
    """Base para erros estruturados do gateway."""

    category: str = "internal"

    def __init__(self, message: str, *, user_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_id = user_id


# ──────────────────────────────────────────────────────────────────────────────
# Sessão
# ──────────────────────────────────────────────────────────────────────────────


class SessionError(GatewayError):
    """Base para erros de ciclo de vida de sessão."""

    category = "session"


class SessionNotFoundError(SessionError):
    """Nenhuma sessão registrada para o account handle."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"sessão não encontrada: {user_id}", user_id=user_id)


class AlreadyAuthenticatedError(SessionError):
    """Sessão já possui credenciais vinculadas (pareamento desnecessário)."""

    def __init__(self, user_id: str) -> None:
        super().__init__("cliente já está autenticado", user_id=user_id)


class SessionNotConnectedError(SessionError):
    """Operação exige conexão ativa com a rede."""

    def __init__(self, user_id: str) -> None:
        super().__init__("cliente não está conectado", user_id=user_id)


# ──────────────────────────────────────────────────────────────────────────────
# Entrada
# ──────────────────────────────────────────────────────────────────────────────


class InvalidAddressError(GatewayError):
    """Destinatário não é telefone plausível nem endereço estruturado válido."""

    category = "input"


class InvalidMessageError(GatewayError):
    """Conteúdo de envio malformado (texto vazio, tipo de mídia desconhecido)."""

    category = "input"


# ──────────────────────────────────────────────────────────────────────────────
# Upstream
# ──────────────────────────────────────────────────────────────────────────────


class UpstreamUnavailableError(GatewayError):
    """Chamada ao adaptador de rede (ou dependência externa) falhou."""

    category = "upstream"


class ConnectionTimeoutError(UpstreamUnavailableError):
    """Espera limitada por confirmação da rede expirou."""


# ──────────────────────────────────────────────────────────────────────────────
# Configuração do webhook
# ──────────────────────────────────────────────────────────────────────────────


class ConfigurationProbeFailedError(GatewayError):
    """Teste de conectividade do webhook falhou (config permanece aplicada)."""

    category = "configuration"


class WebhookNotConfiguredError(GatewayError):
    """Nenhuma URL de webhook configurada."""

    category = "configuration"

    def __init__(self) -> None:
        super().__init__("webhook não configurado")
