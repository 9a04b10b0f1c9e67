"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: Mapeamento de dispositivos em memória (dev/test)
    - redis_device_store: Mapeamento de dispositivos em Redis
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryDeviceMappingStore
from app.infra.stores.redis_device_store import RedisDeviceMappingStore

__all__ = [
    # Memory (dev/test)
    "MemoryDeviceMappingStore",
    # Redis
    "RedisDeviceMappingStore",
]
