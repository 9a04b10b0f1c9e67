"""Redis Device Mapping Store.

Persiste o mapeamento account handle → JID do dispositivo num único hash
Redis, para que o recarregamento no startup enumere todos os tenants com
um HGETALL.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.device_store import DeviceMappingStoreProtocol

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Hash com todos os mapeamentos (campo = user_id, valor = JID)
DEVICE_MAPPINGS_KEY = "wa-gateway:device_mappings"


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisDeviceMappingStore(DeviceMappingStoreProtocol):
    """Store de mapeamento de dispositivos usando Redis (async).

    Args:
        redis_client: Cliente Redis assíncrono
        key: Nome do hash (permite isolar ambientes no mesmo Redis)
    """

    def __init__(
        self,
        redis_client: AsyncRedis[bytes],
        key: str = DEVICE_MAPPINGS_KEY,
    ) -> None:
        self._redis = redis_client
        self._key = key

    async def get_device_jid(self, user_id: str) -> str | None:
        value = await self._redis.hget(self._key, user_id)
        if value is None:
            return None
        return _decode(value)

    async def save_mapping(self, user_id: str, device_jid: str) -> None:
        await self._redis.hset(self._key, user_id, device_jid)
        logger.debug("device_mapping_saved", extra={"user_id": user_id})

    async def delete_mapping(self, user_id: str) -> bool:
        result = await self._redis.hdel(self._key, user_id)
        logger.debug("device_mapping_deleted", extra={"user_id": user_id, "existed": bool(result)})
        return bool(result)

    async def get_all_mappings(self) -> dict[str, str]:
        raw = await self._redis.hgetall(self._key)
        return {_decode(user_id): _decode(jid) for user_id, jid in raw.items()}
