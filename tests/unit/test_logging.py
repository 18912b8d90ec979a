"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO

import pytest

from app.utils.logging import (
    JSONFormatter,
    get_logger,
    log_api_call,
    log_error_with_context,
    log_status_transition,
)


@pytest.fixture
def captured(request):
    """Logger adapter whose JSON output is captured in a buffer."""
    logger = get_logger(f"test.{request.node.name}")
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.logger.addHandler(handler)
    logger.logger.setLevel(logging.INFO)
    logger.logger.propagate = False

    def read():
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    yield logger, read
    logger.logger.removeHandler(handler)


def test_json_formatter(captured):
    """Test JSON formatter produces valid JSON output."""
    logger, read = captured

    logger.info("Test message", extra={"function_name": "sync-orders", "business_day": "2024-01-05"})

    log_data = read()[0]
    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["message"] == "Test message"
    assert log_data["function_name"] == "sync-orders"
    assert log_data["business_day"] == "2024-01-05"
    assert "source" in log_data


def test_unpromoted_fields_go_to_context(captured):
    logger, read = captured

    logger.info("Moved", extra={"operation": "retry_all"})

    log_data = read()[0]
    assert "operation" not in log_data
    assert log_data["context"]["operation"] == "retry_all"


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", function_name="sync-orders", business_day="2024-01-05")

    assert logger.extra["function_name"] == "sync-orders"
    assert logger.extra["business_day"] == "2024-01-05"


def test_with_context_does_not_mutate_parent():
    parent = get_logger("test_module", function_name="sync-orders")
    child = parent.with_context(error_id=7)

    assert child.extra == {"function_name": "sync-orders", "error_id": 7}
    assert "error_id" not in parent.extra


def test_log_status_transition(captured):
    """Test error-record status transition logging."""
    logger, read = captured

    log_status_transition(logger, [1, 2], "notified", business_day="2024-01-05")

    log_data = read()[0]
    assert log_data["business_day"] == "2024-01-05"
    assert log_data["context"]["error_ids"] == [1, 2]
    assert log_data["context"]["status"] == "notified"


def test_log_api_call(captured):
    """Test API call logging."""
    logger, read = captured

    log_api_call(
        logger,
        service="record_store",
        endpoint="/rest/v1/function_errors",
        method="GET",
        status_code=200,
        duration_ms=150.5,
    )

    log_data = read()[0]
    assert log_data["level"] == "INFO"
    for field in ("service", "endpoint", "method", "status_code", "duration_ms"):
        assert field in log_data["context"]


def test_log_api_call_with_error(captured):
    """Test API call logging with error."""
    logger, read = captured

    log_api_call(
        logger,
        service="discord",
        endpoint="/channels/1/messages",
        method="POST",
        error="Connection timeout",
    )

    log_data = read()[0]
    assert log_data["level"] == "ERROR"
    assert log_data["context"]["error"] == "Connection timeout"


def test_log_error_with_context_includes_stack(captured):
    logger, read = captured

    try:
        raise RuntimeError("boom")
    except RuntimeError as e:
        log_error_with_context(logger, "Job failed", e, function_name="test-alert")

    log_data = read()[0]
    assert log_data["function_name"] == "test-alert"
    assert log_data["error"]["type"] == "RuntimeError"
    assert "boom" in log_data["error"]["stack_trace"]
