"""Endpoints de envio de mensagens e verificação de números."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.routes.dependencies import get_message_service
from app.use_cases.messages import MessageService

if TYPE_CHECKING:
    from app.use_cases.messages import SendResult

router = APIRouter()


class SendTextRequest(BaseModel):
    to: str = Field(min_length=1)
    text: str = Field(min_length=1)


class SendMediaRequest(BaseModel):
    to: str = Field(min_length=1)
    media_url: str = Field(min_length=1)
    media_type: str
    caption: str = ""


class CheckNumberRequest(BaseModel):
    phone: str = Field(min_length=1)


class SendResponse(BaseModel):
    message_id: str
    recipient: str
    verified: bool
    timestamp: float


class CheckNumberResponse(BaseModel):
    query: str
    exists: bool
    jid: str | None = None


def _to_response(result: SendResult) -> SendResponse:
    return SendResponse(
        message_id=result.message_id,
        recipient=result.recipient,
        verified=result.verified,
        timestamp=result.timestamp,
    )


@router.post("/{user_id}/text", response_model=SendResponse)
async def send_text(
    user_id: str,
    body: SendTextRequest,
    service: MessageService = Depends(get_message_service),
) -> SendResponse:
    result = await service.send_text(user_id, body.to, body.text)
    return _to_response(result)


@router.post("/{user_id}/media", response_model=SendResponse)
async def send_media(
    user_id: str,
    body: SendMediaRequest,
    service: MessageService = Depends(get_message_service),
) -> SendResponse:
    result = await service.send_media(
        user_id,
        body.to,
        media_url=body.media_url,
        media_type=body.media_type,
        caption=body.caption,
    )
    return _to_response(result)


@router.post("/{user_id}/check", response_model=CheckNumberResponse)
async def check_number(
    user_id: str,
    body: CheckNumberRequest,
    service: MessageService = Depends(get_message_service),
) -> CheckNumberResponse:
    """Verifica existência do número na rede (sem fallback)."""
    check = await service.check_number(user_id, body.phone)
    return CheckNumberResponse(query=check.query, exists=check.exists, jid=check.jid)
