"""
Tests for the log formatters and logging setup.
"""

import json
import logging

from shortener.core.config import settings
from shortener.core.exceptions import NotFoundError
from shortener.core.logging import (
    HANDLER_NAME,
    ConsoleFormatter,
    CustomJsonFormatter,
    setup_logging,
)

REQUEST = {
    "method": "GET",
    "path": "/abc123",
    "status": 301,
    "latency_ms": 1.25,
    "client": "127.0.0.1",
}


def make_record(msg: str = "Redirection", **extra) -> logging.LogRecord:
    return logging.makeLogRecord(
        {"name": "shortener.requests", "levelno": logging.INFO, "levelname": "INFO", "msg": msg, **extra}
    )


def test_json_formatter_groups_request_fields() -> None:
    formatter = CustomJsonFormatter("%(asctime)s %(level)s %(name)s %(message)s")

    payload = json.loads(formatter.format(make_record(**REQUEST)))

    assert payload["message"] == "Redirection"
    assert payload["service"] == settings.PROJECT_NAME
    assert payload["level"] == "INFO"
    assert payload["request"] == REQUEST
    assert "path" not in payload


def test_json_formatter_adds_error_code_from_exception() -> None:
    formatter = CustomJsonFormatter("%(asctime)s %(level)s %(name)s %(message)s")
    error = NotFoundError("URL was not found: abc123")

    payload = json.loads(formatter.format(make_record("failed", exc_info=(NotFoundError, error, None))))

    assert payload["error_code"] == "NotFoundError"
    assert "request" not in payload


def test_console_formatter_appends_request_fields() -> None:
    formatter = ConsoleFormatter("%(levelname)s - %(message)s")

    line = formatter.format(make_record(error_code="FORBIDDEN", **REQUEST))

    assert line == (
        "INFO - Redirection [method=GET path=/abc123 status=301 latency_ms=1.25 "
        "client=127.0.0.1 error_code=FORBIDDEN]"
    )


def test_console_formatter_leaves_plain_records_alone() -> None:
    formatter = ConsoleFormatter("%(levelname)s - %(message)s")
    assert formatter.format(make_record("Starting")) == "INFO - Starting"


def test_setup_logging_twice_keeps_one_handler() -> None:
    setup_logging()
    setup_logging()

    handlers = [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]
    assert len(handlers) == 1
