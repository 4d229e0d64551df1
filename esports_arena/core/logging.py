"""
Structured logging with JSON formatting and correlation ID support.

Every log line emitted while a request is in flight carries the request's
correlation ID, so storage mutations (wallet adjustments, withdrawal reviews,
cascading deletes) can be traced back to the HTTP call that caused them.
"""
import logging
import json
import sys
from datetime import datetime
from typing import Any
from contextvars import ContextVar

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Attributes present on every LogRecord; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "asctime", "taskName",
})


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter.

    Fields: timestamp, level, logger, message, correlation_id, and when
    present exception and extra (anything passed via ``extra=``).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable colored console output for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.COLORS.get(record.levelname, "")
        correlation_id = get_correlation_id()

        base_msg = f"{level_color}[{record.levelname}]{self.RESET} {record.name}: {record.getMessage()}"

        if correlation_id:
            base_msg += f" | correlation_id={correlation_id}"

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)

        return base_msg


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: logging.Handler | None = None,
) -> None:
    """
    Configure the root logger for the application.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, colored console output otherwise
        handler: Optional custom handler; defaults to a stdout StreamHandler
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

    handler.setFormatter(JSONFormatter() if json_output else ColoredFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> Any:
    """Set the correlation ID and return the token needed to reset it."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    """Current correlation ID, or empty string outside a request."""
    return correlation_id_var.get()


def clear_correlation_id(token: Any) -> None:
    """Restore the correlation ID that was active before ``set_correlation_id``."""
    correlation_id_var.reset(token)
