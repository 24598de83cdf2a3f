"""Console and file handlers for the logging profiles."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .formatters import get_formatter

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class ColoredConsoleHandler(logging.StreamHandler):
    """Writes to stdout, coloring the level name when attached to a terminal."""

    def __init__(self, stream=None):
        super().__init__(stream or sys.stdout)
        isatty = getattr(self.stream, "isatty", None)
        self.use_colors = sys.platform != "win32" and bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = LEVEL_COLORS.get(record.levelname) if self.use_colors else None
        if color:
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{RESET}", 1)
        return formatted


def create_console_handler(format_type: str, level: int, use_colors: bool = False) -> logging.Handler:
    handler = ColoredConsoleHandler() if use_colors else logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(get_formatter(format_type))
    return handler


def create_file_handler(
    filepath: str, format_type: str, level: int, max_bytes: int, backup_count: int
) -> logging.Handler:
    """Rotating file handler; the log directory is created if missing."""
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(filepath, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(get_formatter(format_type))
    return handler
