"""Controle de tasks assíncronas em background (fire-and-forget rastreado).

Cada componente (registry, router, dispatcher) mantém seu próprio
conjunto de tasks, drenado no shutdown do processo.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Conjunto rastreado de tasks com limite opcional de concorrência.

    Args:
        name: Identificador do componente (aparece nos logs).
        max_concurrency: Máximo de tasks executando simultaneamente
            (None = sem limite).
    """

    __slots__ = ("_active", "_name", "_semaphore")

    def __init__(self, name: str, max_concurrency: int | None = None) -> None:
        self._name = name
        self._active: set[asyncio.Task[Any]] = set()
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    @property
    def active_count(self) -> int:
        return len(self._active)

    def spawn(self, coroutine: Coroutine[Any, Any, Any], *, label: str) -> asyncio.Task[Any]:
        """Agenda coroutine no loop corrente e rastreia a task."""
        task = asyncio.create_task(self._run(coroutine), name=f"{self._name}:{label}")
        self._active.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _run(self, coroutine: Coroutine[Any, Any, Any]) -> Any:
        if self._semaphore is None:
            return await coroutine
        async with self._semaphore:
            return await coroutine

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._active.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "background_task_failed",
                    extra={
                        "component": self._name,
                        "task": task.get_name(),
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                        "active_tasks": len(self._active),
                    },
                )

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda tasks pendentes durante shutdown; cancela as que excederem o prazo."""
        if not self._active:
            return

        pending_now = list(self._active)
        logger.info(
            "background_tasks_shutdown_wait",
            extra={
                "component": self._name,
                "pending_tasks": len(pending_now),
                "timeout_seconds": timeout_seconds,
            },
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "background_tasks_shutdown_cancelled",
            extra={"component": self._name, "cancelled_tasks": len(pending)},
        )
