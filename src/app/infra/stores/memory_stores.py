"""Stores em memória, apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios
(o recarregamento de sessões no startup não encontra nada).
"""

from __future__ import annotations

from app.protocols.device_store import DeviceMappingStoreProtocol


class MemoryDeviceMappingStore(DeviceMappingStoreProtocol):
    """Mapeamento user_id → JID do dispositivo em memória (dev/test)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._mappings: dict[str, str] = dict(initial or {})

    async def get_device_jid(self, user_id: str) -> str | None:
        return self._mappings.get(user_id)

    async def save_mapping(self, user_id: str, device_jid: str) -> None:
        self._mappings[user_id] = device_jid

    async def delete_mapping(self, user_id: str) -> bool:
        return self._mappings.pop(user_id, None) is not None

    async def get_all_mappings(self) -> dict[str, str]:
        return dict(self._mappings)
