"""Entrypoint do gateway.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request

from api.routes import create_api_router
from api.routes.errors import gateway_error_handler
from app.bootstrap import initialize_app, validate_runtime_settings
from app.bootstrap.dependencies import create_container
from app.observability import (
    CORRELATION_HEADER,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from config.logging import get_logger
from config.settings import get_base_settings
from utils.errors import GatewayError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

    from app.bootstrap.dependencies import GatewayContainer

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


def create_app(
    container_factory: Callable[[], GatewayContainer] | None = None,
) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        container_factory: Monta os componentes no startup. Padrão:
            create_container() a partir do ambiente; testes injetam fakes.
    """
    factory = container_factory or create_container

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: valida settings, monta componentes e restaura sessões.

        Shutdown: desconecta sessões, drena webhooks e fecha clientes.
        """
        logger.info("app_starting")
        validate_runtime_settings()
        container = factory()
        app.state.container = container
        await container.start()

        yield

        logger.info("app_shutting_down")
        await container.shutdown()
        app.state.container = None

    fastapi_app = FastAPI(
        title="wa-gateway",
        description="Gateway multi-tenant para a rede WhatsApp",
        version="1.0.0",
        lifespan=lifespan,
    )

    @fastapi_app.middleware("http")
    async def correlation_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = get_correlation_id()
            return response
        finally:
            reset_correlation_id(token)

    fastapi_app.add_exception_handler(GatewayError, gateway_error_handler)
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured")
    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta."""
    import uvicorn

    settings = get_base_settings()
    logger.info("server_starting", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(
        "app.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development and settings.debug,
    )


if __name__ == "__main__":
    main()
