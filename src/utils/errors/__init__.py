"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    AlreadyAuthenticatedError,
    ConfigurationProbeFailedError,
    ConnectionTimeoutError,
    GatewayError,
    InvalidAddressError,
    InvalidMessageError,
    SessionError,
    SessionNotConnectedError,
    SessionNotFoundError,
    UpstreamUnavailableError,
    WebhookNotConfiguredError,
)

__all__ = [
    "AlreadyAuthenticatedError",
    "ConfigurationProbeFailedError",
    "ConnectionTimeoutError",
    "GatewayError",
    "InvalidAddressError",
    "InvalidMessageError",
    "SessionError",
    "SessionNotConnectedError",
    "SessionNotFoundError",
    "UpstreamUnavailableError",
    "WebhookNotConfiguredError",
]
