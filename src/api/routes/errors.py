"""Tradução de GatewayError em respostas HTTP.

Corpo padrão: {"error": <classe>, "category": <família>, "detail": <mensagem>}.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from utils.errors import (
    ConnectionTimeoutError,
    GatewayError,
    SessionNotFoundError,
    WebhookNotConfiguredError,
)

logger = logging.getLogger(__name__)

# Status por categoria; exceções específicas são tratadas antes
CATEGORY_STATUS = {
    "session": 409,
    "input": 400,
    "upstream": 502,
    "configuration": 502,
}


def http_status_for(exc: GatewayError) -> int:
    if isinstance(exc, SessionNotFoundError):
        return 404
    if isinstance(exc, ConnectionTimeoutError):
        return 504
    if isinstance(exc, WebhookNotConfiguredError):
        return 400
    return CATEGORY_STATUS.get(exc.category, 500)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    status_code = http_status_for(exc)
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "request_failed",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "category": exc.category,
            "status_code": status_code,
            "user_id": exc.user_id,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "category": exc.category,
            "detail": exc.message,
        },
    )
