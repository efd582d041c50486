"""Tests for structured logging."""

import json
import logging

import pytest

from shared.logging import CustomJsonFormatter, OperationContextFilter, operation_ctx, service_ctx, setup_logging


def make_record() -> logging.LogRecord:
    """Create a log record."""
    return logging.LogRecord("services.clients", logging.INFO, __file__, 1, "Operation succeeded", None, None)


@pytest.mark.unit
def test_operation_context_is_added_to_output() -> None:
    """Test that the operation in flight appears in JSON output."""
    formatter = CustomJsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    record = make_record()

    service_token = service_ctx.set("RDS")
    operation_token = operation_ctx.set("DescribeDBInstances")
    try:
        OperationContextFilter().filter(record)
    finally:
        operation_ctx.reset(operation_token)
        service_ctx.reset(service_token)

    output = json.loads(formatter.format(record))
    assert output["service"] == "RDS"
    assert output["operation"] == "DescribeDBInstances"
    assert output["level"] == "INFO"
    assert output["logger"] == "services.clients"
    assert "request_id" not in output


@pytest.mark.unit
def test_setup_logging_configures_root_logger() -> None:
    """Test that setup_logging installs a single JSON handler."""
    root_logger = logging.getLogger()
    previous_handlers = root_logger.handlers[:]
    previous_level = root_logger.level
    try:
        setup_logging("debug")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)
        assert logging.getLogger("botocore").level == logging.WARNING
    finally:
        root_logger.handlers[:] = previous_handlers
        root_logger.setLevel(previous_level)
