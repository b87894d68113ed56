"""Structured logging configuration with mandate context.

This module provides structured JSON logging with:
- Mandate ID and signing role attached to every record emitted while a
  mandate is being signed or verified
- Consistent log formatting (JSON or plain text)
"""
from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

# Context variables for mandate tracking
mandate_id_var: ContextVar[Optional[str]] = ContextVar("mandate_id", default=None)
role_var: ContextVar[Optional[str]] = ContextVar("role", default=None)

_STANDARD_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "mandate_id",
        "role",
    }
)


class MandateContextFilter(logging.Filter):
    """Logging filter that adds mandate context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.mandate_id = mandate_id_var.get()
        record.role = role_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if getattr(record, "mandate_id", None):
            log_data["mandate_id"] = record.mandate_id

        if getattr(record, "role", None):
            log_data["role"] = record.role

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed via `extra=`
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging for an application embedding the mandate library.

    Args:
        level: Logging level; defaults to ``MANDATE_LOG_LEVEL``
        json_format: JSON structured logs (True) or plain text (False);
            defaults to ``MANDATE_LOG_JSON``
        log_file: Optional file path for logging output
    """
    from .config import get_settings

    settings = get_settings()
    level = level or settings.log_level
    if json_format is None:
        json_format = settings.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "[%(mandate_id)s/%(role)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(MandateContextFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(MandateContextFilter())
        root_logger.addHandler(file_handler)


def clear_context() -> None:
    """Clear all context variables."""
    mandate_id_var.set(None)
    role_var.set(None)


class LogContext:
    """Context manager for temporary mandate logging context."""

    def __init__(
        self,
        mandate_id: Optional[str] = None,
        role: Optional[str] = None,
    ):
        self.mandate_id = mandate_id
        self.role = role
        self.previous_context: dict[str, Optional[str]] = {}

    def __enter__(self) -> "LogContext":
        self.previous_context = {
            "mandate_id": mandate_id_var.get(),
            "role": role_var.get(),
        }
        if self.mandate_id:
            mandate_id_var.set(self.mandate_id)
        if self.role:
            role_var.set(self.role)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        mandate_id_var.set(self.previous_context["mandate_id"])
        role_var.set(self.previous_context["role"])
