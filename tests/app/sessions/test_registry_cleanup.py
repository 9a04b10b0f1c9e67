"""Testes da varredura de ociosas e do recarregamento no startup."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.infra.stores import MemoryDeviceMappingStore
from app.sessions import SessionRegistry
from app.sessions.registry_cleanup import select_evictable
from tests.fakes.fake_network import FakeBackend, FakeDevice

USER_ID = "tenant-1"
PAIRED_JID = "5511999990000:2@s.whatsapp.net"
HOUR = 3600.0


def _age(registry: SessionRegistry, user_id: str, seconds: float) -> None:
    session = registry.get_session(user_id)
    assert session is not None
    session.last_active = datetime.now(UTC) - timedelta(seconds=seconds)


class TestCleanupInactiveSessions:
    """Testes de cleanup_inactive_sessions."""

    @pytest.mark.asyncio
    async def test_evicts_idle_disconnected_but_keeps_mapping(self) -> None:
        """Remove da memória; o mapeamento persistido permanece."""
        backend = FakeBackend({PAIRED_JID: FakeDevice(PAIRED_JID)})
        store = MemoryDeviceMappingStore({USER_ID: PAIRED_JID})
        registry = SessionRegistry(backend, store)
        await registry.create_session(USER_ID)
        _age(registry, USER_ID, 2 * HOUR)

        removed = await registry.cleanup_inactive_sessions(HOUR)

        assert removed == 1
        assert USER_ID not in registry
        assert await store.get_device_jid(USER_ID) == PAIRED_JID

    @pytest.mark.asyncio
    async def test_keeps_connected_sessions(self) -> None:
        registry = SessionRegistry(FakeBackend(), MemoryDeviceMappingStore())
        await registry.create_session(USER_ID)
        await registry.connect(USER_ID)
        _age(registry, USER_ID, 2 * HOUR)

        assert await registry.cleanup_inactive_sessions(HOUR) == 0
        assert USER_ID in registry

    @pytest.mark.asyncio
    async def test_keeps_recent_sessions(self) -> None:
        registry = SessionRegistry(FakeBackend(), MemoryDeviceMappingStore())
        await registry.create_session(USER_ID)

        assert await registry.cleanup_inactive_sessions(HOUR) == 0

    @pytest.mark.asyncio
    async def test_skips_session_in_lifecycle_transition(self) -> None:
        registry = SessionRegistry(FakeBackend(), MemoryDeviceMappingStore())
        session = await registry.create_session(USER_ID)
        _age(registry, USER_ID, 2 * HOUR)

        async with session.lifecycle_lock:
            removed = await registry.cleanup_inactive_sessions(HOUR)

        assert removed == 0

    @pytest.mark.asyncio
    async def test_evicted_session_can_be_recreated(self) -> None:
        backend = FakeBackend({PAIRED_JID: FakeDevice(PAIRED_JID)})
        registry = SessionRegistry(backend, MemoryDeviceMappingStore({USER_ID: PAIRED_JID}))
        await registry.create_session(USER_ID)
        _age(registry, USER_ID, 2 * HOUR)
        await registry.cleanup_inactive_sessions(HOUR)

        session = await registry.create_session(USER_ID)

        assert session.device_jid == PAIRED_JID

    @pytest.mark.asyncio
    async def test_select_evictable_uses_reference_time(self) -> None:
        registry = SessionRegistry(FakeBackend(), MemoryDeviceMappingStore())
        await registry.create_session(USER_ID)
        future = datetime.now(UTC) + timedelta(hours=2)

        assert select_evictable(registry.list_sessions(), HOUR, now=future) == [USER_ID]

    @pytest.mark.asyncio
    async def test_periodic_cleanup_runs_and_stops(self) -> None:
        registry = SessionRegistry(FakeBackend(), MemoryDeviceMappingStore())
        await registry.create_session(USER_ID)
        _age(registry, USER_ID, 2 * HOUR)

        registry.start_periodic_cleanup(interval_seconds=0.01, threshold_seconds=HOUR)
        await asyncio.sleep(0.05)
        await registry.stop_periodic_cleanup()

        assert USER_ID not in registry


class TestInitSessions:
    """Testes do recarregamento no startup."""

    @pytest.mark.asyncio
    async def test_restores_and_reconnects_authenticated_sessions(self) -> None:
        backend = FakeBackend({PAIRED_JID: FakeDevice(PAIRED_JID)})
        store = MemoryDeviceMappingStore(
            {USER_ID: PAIRED_JID, "orphan": "5511888880000@s.whatsapp.net"}
        )
        registry = SessionRegistry(backend, store)

        scheduled = await registry.init_sessions(connect_timeout_seconds=1.0)
        await asyncio.sleep(0.01)

        assert scheduled == 1
        restored = registry.get_session(USER_ID)
        assert restored is not None
        assert restored.connected is True
        # Identidade ausente: sessão criada sem credencial e mapeamento descartado
        assert await store.get_device_jid("orphan") is None

    @pytest.mark.asyncio
    async def test_restore_connect_failure_does_not_block_others(self) -> None:
        other_jid = "5511777770000@s.whatsapp.net"
        backend = FakeBackend(
            {PAIRED_JID: FakeDevice(PAIRED_JID), other_jid: FakeDevice(other_jid)},
            confirm_connection=False,
        )
        store = MemoryDeviceMappingStore({USER_ID: PAIRED_JID, "other": other_jid})
        registry = SessionRegistry(backend, store)

        scheduled = await registry.init_sessions(connect_timeout_seconds=0.01)
        await registry.close(drain_timeout_seconds=1.0)

        assert scheduled == 2
        assert await store.get_all_mappings() == {USER_ID: PAIRED_JID, "other": other_jid}
