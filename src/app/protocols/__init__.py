"""Protocolos e contratos do core do gateway.

Colaboradores externos (adaptador da rede e persistência do mapeamento)
ficam atrás destes contratos; implementações concretas são escolhidas
no bootstrap.
"""

from .device_store import DeviceMappingStoreProtocol
from .network_client import (
    Connected,
    DeviceIdentityProtocol,
    Disconnected,
    LoggedOut,
    MessageReceived,
    NetworkBackendProtocol,
    NetworkClientProtocol,
    OutgoingMessage,
    PairingCodes,
    PairingEvent,
    ProbeResult,
    SendReceipt,
)

__all__ = [
    "Connected",
    "DeviceIdentityProtocol",
    "DeviceMappingStoreProtocol",
    "Disconnected",
    "LoggedOut",
    "MessageReceived",
    "NetworkBackendProtocol",
    "NetworkClientProtocol",
    "OutgoingMessage",
    "PairingCodes",
    "PairingEvent",
    "ProbeResult",
    "SendReceipt",
]
