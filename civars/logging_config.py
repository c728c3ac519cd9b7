"""
Logging configuration for civars.

Human-readable console output by default, JSON lines for log aggregation
with --log-format json. Everything goes to stdout.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from .utils import mask_sensitive_data

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_log_level(name: str) -> int:
    """Map a CLI level name (DEBUG/INFO/WARN/ERROR) to a logging level."""
    try:
        return LEVELS[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {name}") from None


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Produces one JSON object per line.
    """

    def __init__(
        self,
        include_exc_info: bool = True,
        extra_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_exc_info = include_exc_info
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_sensitive_data(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        log_data.update(self.extra_fields)

        if self.include_exc_info and record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": mask_sensitive_data(str(record.exc_info[1])),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for console output.

    Full timestamp, colored level name on a TTY, and the caller location
    when report_caller is set.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
        "RESET": "\033[0m",       # Reset
    }

    def __init__(self, use_colors: bool = True, report_caller: bool = False):
        super().__init__()
        self.use_colors = use_colors and sys.stdout.isatty()
        self.report_caller = report_caller

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        levelname = record.levelname
        if self.use_colors:
            color = self.COLORS.get(levelname, self.COLORS["RESET"])
            levelname = f"{color}{levelname:8}{self.COLORS['RESET']}"
        else:
            levelname = f"{levelname:8}"

        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds")

        message = mask_sensitive_data(record.getMessage())
        if self.report_caller:
            message = f"{message} [{record.module}:{record.lineno}]"

        exc_text = ""
        if record.exc_info:
            exc_text = "\n" + "".join(traceback.format_exception(*record.exc_info))

        return f"{timestamp} {levelname} {record.name}: {message}{exc_text}"


def setup_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """
    Setup logging for the application.

    Args:
        level: Logging level
        json_format: If True, use JSON formatter; otherwise human-readable

    Returns:
        Configured logger for the civars package
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter(extra_fields={"service": "civars"})
    else:
        formatter = HumanReadableFormatter(use_colors=True, report_caller=level <= logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # urllib3 connection chatter is noise even at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    logger = logging.getLogger("civars")
    logger.setLevel(level)
    return logger
