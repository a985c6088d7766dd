"""Unit tests for structlog configuration."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from formai.utils.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def test_json_output_is_parseable() -> None:
    stream = io.StringIO()
    configure_logging(log_level="INFO", json_output=True, stream=stream)

    get_logger("formai.test").info("provider_attempt", provider="mistral-ocr", attempt=1)

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "provider_attempt"
    assert record["provider"] == "mistral-ocr"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filtering() -> None:
    stream = io.StringIO()
    configure_logging(log_level="WARNING", json_output=True, stream=stream)

    get_logger("formai.test").info("hidden")
    get_logger("formai.test").warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "shown" in output


def test_stdlib_logging_is_bridged() -> None:
    stream = io.StringIO()
    configure_logging(log_level="INFO", json_output=True, stream=stream)

    logging.getLogger("httpx").info("HTTP Request: POST https://api.example")

    assert "HTTP Request" in stream.getvalue()
