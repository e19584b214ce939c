"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path

from ratelimitations.core.config import LogSettings
from ratelimitations.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    configure_logging,
    hash_identifier,
)


def _logger_with_stream(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_store_credentials():
    """Ensure Redis URLs and passwords never reach the output."""

    logger, stream = _logger_with_stream("test_redaction")

    logger.info(
        "store.connect",
        extra={
            "redis_url": "redis://:hunter2@cache:6379/0",
            "password": "hunter2",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "hunter2" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_raw_consumer():
    """Raw consumer ids are redacted; hashed ones pass through."""

    logger, stream = _logger_with_stream("test_consumer_redaction")
    consumer_hash = hash_identifier("user@example.com")

    logger.info(
        "rate_limit.exceeded",
        extra={
            "consumer": "user@example.com",
            "consumer_hash": consumer_hash,
            "service": "login_attempt",
        },
    )

    payload = json.loads(stream.getvalue())

    assert payload["consumer"] == "[REDACTED]"
    assert payload["consumer_hash"] == consumer_hash
    assert payload["service"] == "login_attempt"
    assert payload["message"] == "rate_limit.exceeded"
    assert payload["level"] == "info"


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""

    logger, stream = _logger_with_stream("test_nested")

    logger.info(
        "nested_event",
        extra={
            "connection": {"url": "redis://:secret@host", "db": 0},
            "safe_data": {"count": 5, "type": "test"},
        },
    )

    output = stream.getvalue()

    assert "secret@host" not in output
    assert "[REDACTED]" in output
    assert '"count": 5' in output


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("abc") == hash_identifier("abc")
    assert hash_identifier("abc") != hash_identifier("abd")
    assert len(hash_identifier("abc")) == 16


def test_configure_logging_file_output(tmp_path: Path):
    log_file = tmp_path / "logs" / "rl.log"
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level

    try:
        configure_logging(LogSettings(output="file", file_path=str(log_file), level="warning"))
        logging.getLogger("ratelimitations.test").warning("rate_limit.exceeded", extra={"tier": "1m"})
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.WARNING
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["tier"] == "1m"
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_configure_logging_plain_format():
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level

    try:
        configure_logging(LogSettings(format="plain"))

        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
