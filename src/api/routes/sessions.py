"""Endpoints de ciclo de vida das sessões.

Endpoints:
- POST   /sessions/{user_id}: cria (idempotente)
- GET    /sessions: lista
- GET    /sessions/{user_id}: status
- POST   /sessions/{user_id}/connect | disconnect | logout | reset
- DELETE /sessions/{user_id}
- GET    /sessions/{user_id}/qr: stream SSE de eventos de pareamento
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import StreamingResponse

from api.routes.dependencies import get_registry
from app.sessions import SessionRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from app.sessions import PairingStream

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_sessions(registry: SessionRegistry = Depends(get_registry)) -> dict[str, Any]:
    sessions = [session.to_status_dict() for session in registry.list_sessions()]
    return {"sessions": sessions, "count": len(sessions)}


@router.post("/{user_id}", status_code=status.HTTP_201_CREATED)
async def create_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    session = await registry.create_session(user_id)
    return session.to_status_dict()


@router.get("/{user_id}")
async def get_session_status(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return registry.get_status(user_id)


@router.post("/{user_id}/connect")
async def connect_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Conecta sessão já pareada; sessões novas devem usar /qr."""
    await registry.connect(user_id)
    return registry.get_status(user_id)


@router.post("/{user_id}/disconnect")
async def disconnect_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    await registry.disconnect(user_id)
    return registry.get_status(user_id)


@router.post("/{user_id}/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    await registry.logout(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/reset")
async def reset_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    session = await registry.reset_session(user_id)
    return session.to_status_dict()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    await registry.delete_session(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/qr")
async def stream_pairing(
    user_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> StreamingResponse:
    """Stream SSE com códigos QR até success/error/timeout.

    Erros de pré-condição (ex: já autenticada) saem como resposta HTTP
    normal, antes de o stream começar.
    """
    stream = await registry.get_qr_channel(user_id)
    return StreamingResponse(
        _sse_events(stream),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


async def _sse_events(stream: PairingStream) -> AsyncIterator[str]:
    try:
        async for item in stream:
            data = json.dumps(item.to_dict(), ensure_ascii=False)
            yield f"event: {item.event}\ndata: {data}\n\n"
    finally:
        # Consumidor desconectado também cancela o pareamento
        await stream.aclose()
        logger.info("pairing_stream_closed", extra={"user_id": stream.user_id})
