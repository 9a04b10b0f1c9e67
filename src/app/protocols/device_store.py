"""Protocolo de persistência do mapeamento account handle → dispositivo."""

from __future__ import annotations

from abc import ABC, abstractmethod


class DeviceMappingStoreProtocol(ABC):
    """Mapeamento durável user_id → JID do dispositivo (string)."""

    @abstractmethod
    async def get_device_jid(self, user_id: str) -> str | None: ...

    @abstractmethod
    async def save_mapping(self, user_id: str, device_jid: str) -> None: ...

    @abstractmethod
    async def delete_mapping(self, user_id: str) -> bool: ...

    @abstractmethod
    async def get_all_mappings(self) -> dict[str, str]: ...
