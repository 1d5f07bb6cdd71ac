"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging

import pytest

from docstore_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


def _record(msg: str = "Event appended", **extra) -> logging.LogRecord:
    record = logging.LogRecord("docstore.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_round_trip() -> None:
    set_log_context(tenant_id="company_a", connection_id="c-1")
    remove_from_log_context("connection_id")

    assert get_log_context() == {"tenant_id": "company_a"}


def test_filter_injects_context_without_overriding_extra() -> None:
    set_log_context(tenant_id="company_a", request_id="r-1")
    record = _record(tenant_id="company_b")

    assert ContextInjectingFilter().filter(record) is True
    assert record.request_id == "r-1"
    assert record.tenant_id == "company_b"


def test_json_formatter_output() -> None:
    formatter = JSONFormatter(static={"service": "docstore-service"})

    line = formatter.format(_record(tenant_id="company_a", recipients=2))
    data = json.loads(line)

    assert data["level"] == "INFO"
    assert data["message"] == "Event appended"
    assert data["service"] == "docstore-service"
    assert data["tenant_id"] == "company_a"
    assert data["recipients"] == 2
    assert data["timestamp"].endswith("Z")


def test_json_formatter_keeps_exceptions_on_one_line() -> None:
    formatter = JSONFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        import sys

        record = logging.LogRecord(
            "docstore.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )

    line = formatter.format(record)

    assert "\n" not in line
    assert "ValueError: boom" in json.loads(line)["exception"]
