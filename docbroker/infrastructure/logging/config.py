"""Environment-aware logging setup.

| Environment | Console                          | File (when enabled) |
|-------------|----------------------------------|---------------------|
| development | detailed, colored                | structured, DEBUG   |
| staging     | structured                       | structured, DEBUG   |
| production  | json, WARNING when optimized     | json                |

Tests replace all of this with a null handler via configure_testing_logging.
"""

import contextvars
import logging
import uuid
from typing import List

from ..config.settings import EnvironmentOption, get_settings
from .handlers import create_console_handler, create_file_handler

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "python_multipart", "multipart")


def setup_logging_configuration() -> None:
    """Install the root handlers for the configured environment.

    Called once during application startup.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in _build_handlers(settings):
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.LOG_CORRELATION_ID:
        add_correlation_id_filter()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)


def _build_handlers(settings) -> List[logging.Handler]:
    production = settings.ENVIRONMENT == EnvironmentOption.PRODUCTION
    handlers: List[logging.Handler] = []

    if settings.LOG_CONSOLE_ENABLED:
        if production:
            level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
            handlers.append(create_console_handler("json", level))
        elif settings.ENVIRONMENT == EnvironmentOption.STAGING:
            handlers.append(create_console_handler("structured", settings.LOG_LEVEL_INT))
        else:
            level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
            handlers.append(create_console_handler("detailed", level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="json" if production else "structured",
                level=settings.LOG_LEVEL_INT if production else logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    return handlers


def configure_testing_logging() -> None:
    """Silence logging for test runs; overrides the normal configuration."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(logging.NullHandler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def get_configured_logger(name: str) -> logging.Logger:
    """Get a logger that inherits from the configured root logger."""
    return logging.getLogger(name)


def add_correlation_id_filter() -> None:
    """Attach the correlation ID filter to every root handler.

    Filters on the logger itself do not run for records propagated from
    child loggers, so the filter is installed on the handlers.
    """
    correlation_filter = CorrelationIdFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(correlation_filter)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds the request correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "correlation_id", get_correlation_id() or "no-correlation")
        return True


correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id")


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Set correlation ID in context for current request.

    Args:
        correlation_id: Unique identifier for request tracing

    Returns:
        Token that restores the previous value when passed to reset_correlation_id
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the correlation ID that was active before set_correlation_id."""
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    try:
        return correlation_id_var.get()
    except LookupError:
        return None


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())
