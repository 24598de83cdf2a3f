"""Logger factory with automatic configuration and settings integration.

This module provides the main interface for obtaining loggers throughout
the broker. It detects calling modules, applies configuration based on
settings on first use, and can bind extra context to every record a
logger emits.
"""

import inspect
import logging
from threading import Lock
from typing import Any, Dict, MutableMapping, Optional, Tuple, Union

from ..config.settings import get_settings
from .config import get_configured_logger, setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, "LoggerAdapter"]:
    """Get a properly configured logger with automatic module detection.

    Args:
        name: Logger name. If None, automatically detects from calling module.
        **extra_context: Additional context to include in log records.

    Returns:
        Configured logger instance ready for use.

    Example:
        ```python
        logger = get_logger()
        logger.info("Upload stored")

        logger = get_logger(component="orchestrator")
        logger.info("Session active", extra={"document_key": key})
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = get_configured_logger(name)

    if extra_context:
        return LoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Manually trigger logging configuration.

    Called automatically when the first logger is requested; the
    application factory calls it explicitly during startup.
    """
    global _logging_configured

    with _configuration_lock:
        if not _logging_configured:
            setup_logging_configuration()
            _logging_configured = True

            logger = logging.getLogger(__name__)
            settings = get_settings()
            logger.info(
                f"Logging configured for {settings.ENVIRONMENT.value} environment",
                extra={
                    "log_level": settings.LOG_LEVEL,
                    "console_enabled": settings.LOG_CONSOLE_ENABLED,
                    "file_enabled": settings.LOG_FILE_ENABLED,
                },
            )


def _ensure_logging_configured() -> None:
    """Ensure logging is configured, calling setup if needed."""
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Detect the module name of the code that called get_logger()."""
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"

    finally:
        del frame


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its bound context with per-call extras."""

    def __init__(self, logger: logging.Logger, extra: Dict[str, Any]):
        super().__init__(logger, extra)

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})

        adapter_extra = self.extra if isinstance(self.extra, dict) else {}
        if isinstance(extra, dict):
            merged_extra = {**adapter_extra, **extra}
        else:
            merged_extra = dict(adapter_extra)

        kwargs["extra"] = merged_extra

        return msg, kwargs
