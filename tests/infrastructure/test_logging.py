"""Tests for the logging helpers."""

import json
import logging
from logging.handlers import RotatingFileHandler
from types import SimpleNamespace

import pytest

from docbroker.infrastructure.config.settings import EnvironmentOption
from docbroker.infrastructure.logging import get_correlation_id, get_logger, reset_correlation_id, set_correlation_id
from docbroker.infrastructure.logging.config import CorrelationIdFilter, _build_handlers
from docbroker.infrastructure.logging.factory import LoggerAdapter
from docbroker.infrastructure.logging.formatters import JSONFormatter, StructuredFormatter, get_formatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("docbroker.test", logging.INFO, __file__, 1, "Upload accepted", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_detects_module_name():
    assert get_logger().name == __name__


def test_get_logger_with_context_returns_adapter():
    logger = get_logger("docbroker.test", component="session_orchestrator")

    assert isinstance(logger, LoggerAdapter)
    _, kwargs = logger.process("message", {"extra": {"upload_id": "abc.docx"}})
    assert kwargs["extra"] == {"component": "session_orchestrator", "upload_id": "abc.docx"}


def test_correlation_id_context():
    token = set_correlation_id("req-1")
    try:
        record = _record()
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "req-1"
    finally:
        reset_correlation_id(token)

    assert get_correlation_id() is None


def test_json_formatter_includes_extras():
    output = json.loads(JSONFormatter().format(_record(upload_id="abc.docx", size=12)))

    assert output["message"] == "Upload accepted"
    assert output["upload_id"] == "abc.docx"
    assert output["size"] == 12


def test_unknown_formatter():
    with pytest.raises(ValueError):
        get_formatter("xml")


def _log_settings(environment: EnvironmentOption, **overrides) -> SimpleNamespace:
    values = dict(
        ENVIRONMENT=environment,
        LOG_LEVEL_INT=logging.INFO,
        LOG_CONSOLE_ENABLED=True,
        LOG_FILE_ENABLED=False,
        LOG_FILE_PATH="logs/docbroker.log",
        LOG_FILE_MAX_SIZE=1024,
        LOG_FILE_BACKUP_COUNT=1,
        LOG_DEVELOPMENT_VERBOSE=True,
        LOG_PRODUCTION_OPTIMIZE=True,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_production_console_logs_json_at_warning():
    (handler,) = _build_handlers(_log_settings(EnvironmentOption.PRODUCTION))

    assert isinstance(handler.formatter, JSONFormatter)
    assert handler.level == logging.WARNING


def test_development_console_is_verbose():
    (handler,) = _build_handlers(_log_settings(EnvironmentOption.DEVELOPMENT))

    assert handler.level == logging.DEBUG


def test_file_handler_creates_log_directory(tmp_path):
    log_path = tmp_path / "logs" / "broker.log"
    settings = _log_settings(
        EnvironmentOption.STAGING, LOG_CONSOLE_ENABLED=False, LOG_FILE_ENABLED=True, LOG_FILE_PATH=str(log_path)
    )

    (handler,) = _build_handlers(settings)
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert isinstance(handler.formatter, StructuredFormatter)
        assert log_path.parent.is_dir()
    finally:
        handler.close()
