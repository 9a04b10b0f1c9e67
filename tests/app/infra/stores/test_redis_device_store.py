"""Testes do RedisDeviceMappingStore com mock."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from app.infra.stores.redis_device_store import DEVICE_MAPPINGS_KEY, RedisDeviceMappingStore

JID = "5511999999999.0:1@s.whatsapp.net"


class TestRedisDeviceMappingStore:
    """Testes do RedisDeviceMappingStore (API assíncrona)."""

    @pytest.mark.asyncio
    async def test_save_calls_hset(self) -> None:
        mock_redis = AsyncMock()
        store = RedisDeviceMappingStore(mock_redis)

        await store.save_mapping("tenant-1", JID)

        mock_redis.hset.assert_awaited_once_with(DEVICE_MAPPINGS_KEY, "tenant-1", JID)

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.hget.return_value = JID.encode()
        store = RedisDeviceMappingStore(mock_redis)

        assert await store.get_device_jid("tenant-1") == JID
        mock_redis.hget.assert_awaited_once_with(DEVICE_MAPPINGS_KEY, "tenant-1")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.hget.return_value = None
        store = RedisDeviceMappingStore(mock_redis)

        assert await store.get_device_jid("tenant-1") is None

    @pytest.mark.asyncio
    async def test_delete_returns_bool(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.hdel.return_value = 1
        store = RedisDeviceMappingStore(mock_redis)

        assert await store.delete_mapping("tenant-1") is True

        mock_redis.hdel.return_value = 0
        assert await store.delete_mapping("tenant-1") is False

    @pytest.mark.asyncio
    async def test_get_all_decodes_hash(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.hgetall.return_value = {b"t1": JID.encode(), "t2": "other@s.whatsapp.net"}
        store = RedisDeviceMappingStore(mock_redis)

        assert await store.get_all_mappings() == {"t1": JID, "t2": "other@s.whatsapp.net"}

    @pytest.mark.asyncio
    async def test_custom_key_isolates_environment(self) -> None:
        mock_redis = AsyncMock()
        mock_redis.hgetall.return_value = {}
        store = RedisDeviceMappingStore(mock_redis, key="staging:mappings")

        await store.get_all_mappings()

        mock_redis.hgetall.assert_awaited_once_with("staging:mappings")
