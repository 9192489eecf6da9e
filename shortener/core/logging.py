"""
Logging for the shortener service.

Records are JSON in production and one line of text under DEBUG. Request
fields passed by the request logging middleware through ``extra`` and the
code of a logged ``ShortenerError`` show up in both formats.
"""

import logging
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from shortener.core.config import settings
from shortener.core.exceptions import ShortenerError

HANDLER_NAME = "shortener"

# Fields set by RequestLoggingMiddleware, in display order
REQUEST_FIELDS = ("method", "path", "status", "latency_ms", "client")


def error_code(record: logging.LogRecord) -> Optional[str]:
    """Code of the ShortenerError attached to the record, if any."""
    if record.exc_info and isinstance(record.exc_info[1], ShortenerError):
        return record.exc_info[1].code
    return getattr(record, "error_code", None)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service identity, request fields and error codes."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = settings.PROJECT_NAME
        log_record["version"] = settings.VERSION
        log_record["level"] = record.levelname

        request = {field: getattr(record, field) for field in REQUEST_FIELDS if hasattr(record, field)}
        if request:
            for field in request:
                log_record.pop(field, None)
            log_record["request"] = request

        code = error_code(record)
        if code:
            log_record["error_code"] = code


class ConsoleFormatter(logging.Formatter):
    """Text formatter that appends request fields and error codes as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [f"{field}={getattr(record, field)}" for field in REQUEST_FIELDS if hasattr(record, field)]
        code = error_code(record)
        if code:
            pairs.append(f"error_code={code}")
        if not pairs:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} [{' '.join(pairs)}]{sep}{tail}"


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Safe to call more than once: the shortener handler is replaced, not duplicated.
    """
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)

    if settings.DEBUG:
        formatter: logging.Formatter = ConsoleFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = CustomJsonFormatter(
            "%(asctime)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Bcrypt backend probing and per-request access lines are noise here
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)
    """
    return logging.getLogger(name)
