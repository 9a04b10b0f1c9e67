"""Testes para config.logging.

Cobre: configure_logging, get_logger, log_fallback,
CorrelationIdFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME, NOISY_LOGGERS, VALID_LOG_LEVELS


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Restaura handlers e nível do root após cada teste."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    root.handlers = handlers
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


def _record(msg: str = "msg", name: str = "test", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_default_level(self) -> None:
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_configure_logging_levels(self, level: str, expected: int) -> None:
        """Nível é aplicado (case insensitive)."""
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_configure_logging_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1

    def test_configure_logging_installs_correlation_filter(self) -> None:
        configure_logging(correlation_id_getter=lambda: "custom-corr-id")
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)

    def test_noisy_loggers_silenced_outside_debug(self) -> None:
        """httpx loga cada request em INFO; fica em WARNING."""
        configure_logging(level="INFO")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_valid_log_levels_constant(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS

    def test_default_service_name_constant(self) -> None:
        assert DEFAULT_SERVICE_NAME == "wa-gateway"


class TestGetLogger:
    """Testes para get_logger."""

    def test_get_logger_returns_logger(self) -> None:
        logger = get_logger("test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"

    def test_get_logger_same_name_returns_same_instance(self) -> None:
        assert get_logger("same.module") is get_logger("same.module")


class TestLogFallback:
    """Testes para log_fallback."""

    def test_log_fallback_basic(self) -> None:
        """Fallback sai em WARNING com template lazy."""
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "recipient_resolver")
        logger.warning.assert_called_once()
        call_args = logger.warning.call_args
        assert call_args[0][0] == "Fallback applied for %s"
        assert call_args[0][1] == "recipient_resolver"
        extra = call_args[1]["extra"]
        assert extra["fallback_used"] is True
        assert extra["component"] == "recipient_resolver"

    def test_log_fallback_with_all_params(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "component", reason="existence_not_confirmed", elapsed_ms=12.5)
        extra = logger.warning.call_args[1]["extra"]
        assert extra["reason"] == "existence_not_confirmed"
        assert extra["elapsed_ms"] == 12.5

    def test_log_fallback_without_optional_params(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "test_component")
        extra = logger.warning.call_args[1]["extra"]
        assert "reason" not in extra
        assert "elapsed_ms" not in extra


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_filter_adds_correlation_id_from_getter(self) -> None:
        filter_ = CorrelationIdFilter("my_service", lambda: "corr-123")
        record = _record()
        assert filter_.filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "my_service"

    def test_filter_preserves_explicit_correlation_id(self) -> None:
        filter_ = CorrelationIdFilter("svc", lambda: "from-getter")
        record = _record()
        record.correlation_id = "explicit-id"
        filter_.filter(record)
        assert record.correlation_id == "explicit-id"

    def test_filter_uses_empty_string_when_no_getter(self) -> None:
        """Eventos da rede não têm requisição de origem."""
        filter_ = CorrelationIdFilter("service_name", None)
        record = _record()
        filter_.filter(record)
        assert record.correlation_id == ""


class TestCreateJsonFormatter:
    """Testes para create_json_formatter e constantes."""

    def test_required_log_fields_content(self) -> None:
        expected = {"asctime", "levelname", "name", "message", "correlation_id", "service"}
        assert set(REQUIRED_LOG_FIELDS) == expected

    def test_field_rename_map_content(self) -> None:
        assert FIELD_RENAME_MAP == {
            "levelname": "level",
            "name": "logger",
            "asctime": "timestamp",
        }

    def test_json_formatter_emits_renamed_fields(self) -> None:
        formatter = create_json_formatter()
        record = _record("session_connected", name="app.sessions.registry")
        record.correlation_id = "abc-123"
        record.service = "wa-gateway"
        record.user_id = "tenant-1"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "session_connected"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.sessions.registry"
        assert payload["correlation_id"] == "abc-123"
        assert payload["service"] == "wa-gateway"
        assert payload["user_id"] == "tenant-1"
        assert "timestamp" in payload
