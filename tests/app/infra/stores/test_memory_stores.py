"""Testes do store de mapeamento em memória."""

from __future__ import annotations

import pytest

from app.infra.stores.memory_stores import MemoryDeviceMappingStore

JID = "5511999999999.0:1@s.whatsapp.net"


class TestMemoryDeviceMappingStore:
    """Testes do MemoryDeviceMappingStore."""

    @pytest.mark.asyncio
    async def test_save_and_get(self) -> None:
        store = MemoryDeviceMappingStore()

        await store.save_mapping("tenant-1", JID)

        assert await store.get_device_jid("tenant-1") == JID

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        store = MemoryDeviceMappingStore()
        assert await store.get_device_jid("nope") is None

    @pytest.mark.asyncio
    async def test_save_overwrites(self) -> None:
        store = MemoryDeviceMappingStore({"tenant-1": "old@s.whatsapp.net"})

        await store.save_mapping("tenant-1", JID)

        assert await store.get_device_jid("tenant-1") == JID

    @pytest.mark.asyncio
    async def test_delete_reports_existence(self) -> None:
        store = MemoryDeviceMappingStore({"tenant-1": JID})

        assert await store.delete_mapping("tenant-1") is True
        assert await store.delete_mapping("tenant-1") is False
        assert await store.get_device_jid("tenant-1") is None

    @pytest.mark.asyncio
    async def test_get_all_returns_copy(self) -> None:
        """Mutação do retorno não afeta o store."""
        store = MemoryDeviceMappingStore({"a": JID, "b": JID})

        mappings = await store.get_all_mappings()
        mappings.clear()

        assert await store.get_all_mappings() == {"a": JID, "b": JID}
