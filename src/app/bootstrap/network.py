"""Carregamento do backend da rede de mensageria.

O backend concreto vive fora deste pacote. `WHATSAPP_CLIENT_FACTORY`
aponta para um callable (`pacote.modulo:callable`) que, chamado sem
argumentos, devolve uma instância de NetworkBackendProtocol.
"""

from __future__ import annotations

import importlib
import logging

from app.protocols.network_client import NetworkBackendProtocol

logger = logging.getLogger(__name__)


class NetworkBackendLoadError(RuntimeError):
    """Backend da rede não pôde ser carregado."""


def load_network_backend(factory_path: str) -> NetworkBackendProtocol:
    """Importa e invoca a factory do backend.

    Args:
        factory_path: Caminho no formato `modulo:callable`.

    Raises:
        NetworkBackendLoadError: Caminho inválido, import falhou ou o objeto
            devolvido não implementa NetworkBackendProtocol.
    """
    module_name, sep, attr = factory_path.partition(":")
    if not sep or not module_name or not attr:
        raise NetworkBackendLoadError(
            f"WHATSAPP_CLIENT_FACTORY inválido: {factory_path!r} (esperado modulo:callable)"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise NetworkBackendLoadError(f"módulo não encontrado: {module_name}") from exc

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise NetworkBackendLoadError(f"{factory_path} não é um callable")

    backend = factory()
    if not isinstance(backend, NetworkBackendProtocol):
        raise NetworkBackendLoadError(
            f"{factory_path} devolveu {type(backend).__name__}, "
            "esperado NetworkBackendProtocol"
        )

    logger.info("network_backend_loaded", extra={"factory": factory_path})
    return backend
