"""Formatters de logging estruturado.

Todo log sai como uma linha JSON com os campos obrigatórios abaixo,
mais os campos passados via `extra` (user_id, event_type, etc.).
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

# Mapeamento de nomes de campos para formato padrão
FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
    "asctime": "timestamp",
}

ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {"timestamp": "2026-02-02T10:30:00+0000", "level": "INFO",
         "logger": "app.sessions.registry", "message": "session_connected",
         "correlation_id": "abc-123", "service": "wa-gateway", "user_id": "t1"}
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        datefmt=ISO_DATE_FORMAT,
    )
