"""Registry de sessões por tenant.

Mantém o mapa account handle → Session e é dono de todo o ciclo de vida:
criação, conexão, pareamento, desconexão, logout, reset, remoção e
varredura de ociosas.

Concorrência:
    - `_lock` (registry) protege mutações estruturais do mapa
    - `Session.lifecycle_lock` serializa I/O de conexão por handle
    - I/O de rede nunca ocorre sob o lock do registry
    - ordem permitida: lifecycle_lock → _lock (nunca o inverso)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from app.infra.tasks import BackgroundTasks
from app.recipients.jid import parse_jid
from app.sessions.models import Session
from app.sessions.pairing import (
    DEFAULT_PAIRING_TIMEOUT_SECONDS,
    PairingStream,
    connect_with_retries,
)
from app.sessions.registry_cleanup import (
    DEFAULT_CLEANUP_INTERVAL_SECONDS,
    DEFAULT_INACTIVE_THRESHOLD_SECONDS,
    run_periodic_cleanup,
    select_evictable,
)
from app.sessions.registry_restore import (
    DEFAULT_RESTORE_CONNECT_TIMEOUT_SECONDS,
    restore_sessions,
)
from utils.errors import (
    AlreadyAuthenticatedError,
    ConnectionTimeoutError,
    GatewayError,
    InvalidAddressError,
    SessionNotFoundError,
    UpstreamUnavailableError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from app.protocols.device_store import DeviceMappingStoreProtocol
    from app.protocols.network_client import (
        DeviceIdentityProtocol,
        NetworkBackendProtocol,
        NetworkClientProtocol,
    )

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_QR_MAX_ATTEMPTS = 3
DEFAULT_QR_RETRY_BACKOFF_SECONDS = 2.0
DEFAULT_QR_RECONNECT_DELAY_SECONDS = 1.0


class SessionRegistry:
    """Mapa concorrente de sessões com ciclo de vida completo.

    Args:
        backend: Container de dispositivos + fábrica de clientes da rede.
        mapping_store: Mapeamento persistido user_id → JID do dispositivo.
        connect_timeout_seconds: Espera máxima por confirmação em connect().
        qr_max_attempts: Tentativas de conexão durante pareamento.
        qr_retry_backoff_seconds: Espera entre tentativas de pareamento.
        pairing_timeout_seconds: Prazo total do stream de pareamento.
        qr_reconnect_delay_seconds: Pausa após desconectar antes de parear.
    """

    __slots__ = (
        "_backend",
        "_cleanup_task",
        "_connect_timeout",
        "_event_callback",
        "_lock",
        "_mapping_store",
        "_pairing_timeout",
        "_qr_backoff",
        "_qr_max_attempts",
        "_qr_reconnect_delay",
        "_sessions",
        "_tasks",
    )

    def __init__(
        self,
        backend: NetworkBackendProtocol,
        mapping_store: DeviceMappingStoreProtocol,
        *,
        connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        qr_max_attempts: int = DEFAULT_QR_MAX_ATTEMPTS,
        qr_retry_backoff_seconds: float = DEFAULT_QR_RETRY_BACKOFF_SECONDS,
        pairing_timeout_seconds: float = DEFAULT_PAIRING_TIMEOUT_SECONDS,
        qr_reconnect_delay_seconds: float = DEFAULT_QR_RECONNECT_DELAY_SECONDS,
    ) -> None:
        self._backend = backend
        self._mapping_store = mapping_store
        self._connect_timeout = connect_timeout_seconds
        self._qr_max_attempts = qr_max_attempts
        self._qr_backoff = qr_retry_backoff_seconds
        self._pairing_timeout = pairing_timeout_seconds
        self._qr_reconnect_delay = qr_reconnect_delay_seconds
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._event_callback: Callable[[str, object], None] | None = None
        self._cleanup_task: asyncio.Task[None] | None = None
        self._tasks = BackgroundTasks("session_registry")

    # ──────────────────────────────────────────────────────────────────────
    # Wiring
    # ──────────────────────────────────────────────────────────────────────

    def set_event_callback(self, callback: Callable[[str, object], None]) -> None:
        """Define o callback global de eventos (tipicamente EventRouter.process_event)."""
        self._event_callback = callback

    def spawn(self, coroutine: Coroutine[Any, Any, Any], *, label: str) -> asyncio.Task[Any]:
        """Agenda trabalho em background rastreado pelo registry."""
        return self._tasks.spawn(coroutine, label=label)

    def _dispatch_raw_event(self, user_id: str, event: object) -> None:
        callback = self._event_callback
        if callback is None:
            logger.debug("event_dropped_no_callback", extra={"user_id": user_id})
            return
        callback(user_id, event)

    def _new_client(self, user_id: str, device: DeviceIdentityProtocol) -> NetworkClientProtocol:
        try:
            client = self._backend.create_client(device)
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"falha ao criar cliente: {exc}", user_id=user_id
            ) from exc
        client.add_event_handler(lambda event: self._dispatch_raw_event(user_id, event))
        return client

    # ──────────────────────────────────────────────────────────────────────
    # Lookup
    # ──────────────────────────────────────────────────────────────────────

    def get_session(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def require_session(self, user_id: str) -> Session:
        """Retorna a sessão ou levanta SessionNotFoundError."""
        session = self._sessions.get(user_id)
        if session is None:
            raise SessionNotFoundError(user_id)
        return session

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    # ──────────────────────────────────────────────────────────────────────
    # Criação
    # ──────────────────────────────────────────────────────────────────────

    async def create_session(self, user_id: str) -> Session:
        """Retorna a sessão existente ou cria uma nova (idempotente).

        Fluxo de criação:
            1. Busca JID persistido para o handle
            2. JID inválido ou dispositivo ausente → remove mapeamento,
               aloca dispositivo novo
            3. Cria cliente, registra callback de eventos, insere no mapa

        Raises:
            UpstreamUnavailableError: Falha no store ou no container de dispositivos.
        """
        async with self._lock:
            existing = self._sessions.get(user_id)
            if existing is not None:
                return existing

            device = await self._load_or_allocate_device(user_id)
            client = self._new_client(user_id, device)
            session = Session(user_id=user_id, client=client)
            self._sessions[user_id] = session

        logger.info(
            "session_created",
            extra={"user_id": user_id, "has_credentials": session.has_credentials},
        )
        return session

    async def _load_or_allocate_device(self, user_id: str) -> DeviceIdentityProtocol:
        try:
            stored_jid = await self._mapping_store.get_device_jid(user_id)
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"falha ao ler mapeamento de dispositivo: {exc}", user_id=user_id
            ) from exc

        if stored_jid is None:
            return self._backend.new_device()

        try:
            jid = parse_jid(stored_jid)
        except InvalidAddressError:
            logger.warning("device_mapping_invalid_jid", extra={"user_id": user_id})
            await self._delete_mapping(user_id)
            return self._backend.new_device()

        try:
            device = await self._backend.get_device(jid)
        except Exception as exc:
            raise UpstreamUnavailableError(
                f"falha ao carregar dispositivo: {exc}", user_id=user_id
            ) from exc

        if device is None:
            logger.warning("device_not_found_for_mapping", extra={"user_id": user_id})
            await self._delete_mapping(user_id)
            return self._backend.new_device()
        return device

    # ──────────────────────────────────────────────────────────────────────
    # Conexão
    # ──────────────────────────────────────────────────────────────────────

    async def connect(self, user_id: str, *, timeout_seconds: float | None = None) -> None:
        """Conecta a sessão e aguarda confirmação (idempotente).

        Chamadas concorrentes para o mesmo handle resultam em uma única
        tentativa de conexão no adaptador.

        Raises:
            SessionNotFoundError: Handle sem sessão.
            ConnectionTimeoutError: Confirmação não chegou no prazo (a conexão
                subjacente pode continuar aberta).
            UpstreamUnavailableError: Adaptador falhou ao conectar.
        """
        session = self.require_session(user_id)
        timeout = timeout_seconds if timeout_seconds is not None else self._connect_timeout

        async with session.lifecycle_lock:
            if self._sessions.get(user_id) is not session:
                raise SessionNotFoundError(user_id)
            if session.client.is_connected():
                session.connected = True
                session.touch()
                return

            try:
                await session.client.connect()
            except GatewayError:
                raise
            except Exception as exc:
                raise UpstreamUnavailableError(
                    f"falha ao conectar: {exc}", user_id=user_id
                ) from exc

            try:
                confirmed = await asyncio.wait_for(
                    session.client.wait_for_connection(timeout), timeout=timeout
                )
            except TimeoutError:
                confirmed = False
            except GatewayError:
                raise
            except Exception as exc:
                raise UpstreamUnavailableError(
                    f"falha ao aguardar conexão: {exc}", user_id=user_id
                ) from exc
            if not confirmed:
                logger.warning(
                    "session_connect_timeout",
                    extra={"user_id": user_id, "timeout_seconds": timeout},
                )
                raise ConnectionTimeoutError("tempo de conexão esgotado", user_id=user_id)

            session.connected = True
            session.touch()

        logger.info("session_connected", extra={"user_id": user_id})

    async def get_qr_channel(self, user_id: str) -> PairingStream:
        """Inicia pareamento e retorna o stream de eventos de QR.

        Cria a sessão se não existir. Se estiver conectada, desconecta antes
        de iniciar um pareamento novo.

        Raises:
            AlreadyAuthenticatedError: Dispositivo já possui credenciais.
            UpstreamUnavailableError: Adaptador não forneceu o canal.
        """
        session = await self.create_session(user_id)

        async with session.lifecycle_lock:
            if session.has_credentials:
                raise AlreadyAuthenticatedError(user_id)

            if session.client.is_connected():
                await self._disconnect_client(session)
                await asyncio.sleep(self._qr_reconnect_delay)

            try:
                channel = await session.client.get_qr_channel()
            except Exception as exc:
                raise UpstreamUnavailableError(
                    f"falha ao obter canal de QR: {exc}", user_id=user_id
                ) from exc

        driver = self.spawn(
            connect_with_retries(
                session,
                max_attempts=self._qr_max_attempts,
                backoff_seconds=self._qr_backoff,
            ),
            label=f"pairing:{user_id}",
        )
        logger.info("pairing_started", extra={"user_id": user_id})
        return PairingStream(user_id, channel, driver, timeout_seconds=self._pairing_timeout)

    async def _disconnect_client(self, session: Session) -> bool:
        """Desconecta o cliente (melhor esforço). Chamar sob lifecycle_lock."""
        ok = True
        if session.client.is_connected():
            try:
                await session.client.disconnect()
            except Exception as exc:
                ok = False
                logger.warning(
                    "session_disconnect_failed",
                    extra={"user_id": session.user_id, "error_type": type(exc).__name__},
                )
        session.connected = False
        session.touch()
        return ok

    async def disconnect(self, user_id: str) -> None:
        """Desconecta a sessão; no-op se não estiver conectada.

        Raises:
            SessionNotFoundError: Handle sem sessão.
        """
        session = self.require_session(user_id)
        async with session.lifecycle_lock:
            if not session.connected and not session.client.is_connected():
                return
            await self._disconnect_client(session)
        logger.info("session_disconnected", extra={"user_id": user_id})

    async def disconnect_all(self) -> None:
        """Desconecta todas as sessões; nunca levanta (falhas são logadas)."""
        for session in self.list_sessions():
            try:
                async with session.lifecycle_lock:
                    await self._disconnect_client(session)
            except Exception as exc:
                logger.error(
                    "session_disconnect_all_failed",
                    extra={"user_id": session.user_id, "error_type": type(exc).__name__},
                )
        logger.info("sessions_disconnected_all", extra={"sessions": len(self._sessions)})

    # ──────────────────────────────────────────────────────────────────────
    # Logout / reset / remoção
    # ──────────────────────────────────────────────────────────────────────

    async def logout(self, user_id: str) -> None:
        """Invalida a credencial na rede (melhor esforço) e remove a sessão.

        Sempre remove a sessão do registry e o mapeamento persistido.

        Raises:
            SessionNotFoundError: Handle sem sessão.
        """
        session = self.require_session(user_id)
        async with session.lifecycle_lock:
            client = session.client
            if client.is_connected() and client.is_logged_in():
                try:
                    await client.logout()
                except Exception as exc:
                    logger.warning(
                        "session_logout_failed",
                        extra={"user_id": user_id, "error_type": type(exc).__name__},
                    )
            await self._disconnect_client(session)
            await self._remove(user_id, session)

        await self._delete_mapping(user_id)
        logger.info("session_logged_out", extra={"user_id": user_id})

    async def reset_session(self, user_id: str) -> Session:
        """Descarta a credencial e realoca dispositivo/cliente no lugar.

        A sessão permanece no registry, sem autenticação.

        Raises:
            SessionNotFoundError: Handle sem sessão.
        """
        session = self.require_session(user_id)
        async with session.lifecycle_lock:
            await self._rebind_fresh_device(session)
        logger.info("session_reset", extra={"user_id": user_id})
        return session

    async def handle_device_logout(self, user_id: str) -> None:
        """Recupera a sessão após logout forçado pela rede (reset no lugar)."""
        session = self.get_session(user_id)
        if session is None:
            logger.warning("device_logout_unknown_session", extra={"user_id": user_id})
            return
        async with session.lifecycle_lock:
            await self._rebind_fresh_device(session)
        logger.info("session_device_logout_handled", extra={"user_id": user_id})

    async def _rebind_fresh_device(self, session: Session) -> None:
        await self._disconnect_client(session)
        await self._delete_mapping(session.user_id)
        device = self._backend.new_device()
        session.client = self._new_client(session.user_id, device)
        session.connected = False
        session.touch()

    async def delete_session(self, user_id: str) -> None:
        """Desconecta, remove do registry e apaga o mapeamento persistido.

        Raises:
            SessionNotFoundError: Handle sem sessão.
        """
        session = self.require_session(user_id)
        async with session.lifecycle_lock:
            await self._disconnect_client(session)
            await self._remove(user_id, session)
        await self._delete_mapping(user_id)
        logger.info("session_deleted", extra={"user_id": user_id})

    async def _remove(self, user_id: str, session: Session) -> None:
        async with self._lock:
            if self._sessions.get(user_id) is session:
                del self._sessions[user_id]

    async def _delete_mapping(self, user_id: str) -> None:
        try:
            await self._mapping_store.delete_mapping(user_id)
        except Exception as exc:
            logger.error(
                "device_mapping_delete_failed",
                extra={"user_id": user_id, "error_type": type(exc).__name__},
            )

    # ──────────────────────────────────────────────────────────────────────
    # Status e bookkeeping de eventos
    # ──────────────────────────────────────────────────────────────────────

    def get_status(self, user_id: str) -> dict[str, Any]:
        """Estado da sessão para a superfície de status.

        Raises:
            SessionNotFoundError: Handle sem sessão.
        """
        return self.require_session(user_id).to_status_dict()

    def touch(self, user_id: str) -> None:
        session = self._sessions.get(user_id)
        if session is not None:
            session.touch()

    def mark_connected(self, user_id: str) -> None:
        session = self._sessions.get(user_id)
        if session is not None:
            session.connected = True

    def mark_disconnected(self, user_id: str) -> None:
        session = self._sessions.get(user_id)
        if session is not None:
            session.connected = False

    async def persist_device_mapping(self, user_id: str) -> None:
        """Grava user_id → JID do dispositivo (após conexão autenticada)."""
        session = self._sessions.get(user_id)
        if session is None or session.device_jid is None:
            return
        try:
            await self._mapping_store.save_mapping(user_id, session.device_jid)
        except Exception as exc:
            logger.error(
                "device_mapping_save_failed",
                extra={"user_id": user_id, "error_type": type(exc).__name__},
            )
            return
        logger.info("device_mapping_saved", extra={"user_id": user_id})

    # ──────────────────────────────────────────────────────────────────────
    # Startup / varredura / shutdown
    # ──────────────────────────────────────────────────────────────────────

    async def init_sessions(
        self,
        *,
        connect_timeout_seconds: float = DEFAULT_RESTORE_CONNECT_TIMEOUT_SECONDS,
    ) -> int:
        """Recarrega todos os mapeamentos persistidos e agenda reconexões.

        Returns:
            Quantidade de reconexões agendadas.
        """
        try:
            mappings = await self._mapping_store.get_all_mappings()
        except Exception as exc:
            logger.error("session_restore_list_failed", extra={"error_type": type(exc).__name__})
            return 0
        return await restore_sessions(
            self, mappings, connect_timeout_seconds=connect_timeout_seconds
        )

    async def cleanup_inactive_sessions(self, threshold_seconds: float) -> int:
        """Remove sessões desconectadas e ociosas além do limite.

        Nunca remove sessões conectadas nem em transição de ciclo de vida,
        e nunca apaga o mapeamento persistido.

        Returns:
            Quantidade de sessões removidas.
        """
        async with self._lock:
            evictable = select_evictable(self._sessions.values(), threshold_seconds)
            for user_id in evictable:
                del self._sessions[user_id]

        for user_id in evictable:
            logger.info("session_evicted_inactive", extra={"user_id": user_id})
        return len(evictable)

    def start_periodic_cleanup(
        self,
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        threshold_seconds: float = DEFAULT_INACTIVE_THRESHOLD_SECONDS,
    ) -> None:
        """Inicia a varredura periódica (no-op se já estiver ativa)."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(
            run_periodic_cleanup(
                self.cleanup_inactive_sessions,
                interval_seconds=interval_seconds,
                threshold_seconds=threshold_seconds,
            ),
            name="session_registry:cleanup",
        )

    async def stop_periodic_cleanup(self) -> None:
        task = self._cleanup_task
        self._cleanup_task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def close(self, drain_timeout_seconds: float = 10.0) -> None:
        """Encerra varredura, desconecta tudo e limpa o mapa."""
        await self.stop_periodic_cleanup()
        await self._tasks.drain(drain_timeout_seconds)
        await self.disconnect_all()
        async with self._lock:
            self._sessions.clear()
        logger.info("session_registry_closed")

