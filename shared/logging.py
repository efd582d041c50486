"""Structured JSON logging configuration."""

import logging
import sys
from contextvars import ContextVar
from typing import Any

from pythonjsonlogger import jsonlogger

# Context variables for the operation in flight
service_ctx: ContextVar[str | None] = ContextVar("service", default=None)
operation_ctx: ContextVar[str | None] = ContextVar("operation", default=None)
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


class OperationContextFilter(logging.Filter):
    """Add operation context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add service, operation and request id from context to log record."""
        record.service = service_ctx.get()  # type: ignore[attr-defined]
        record.operation = operation_ctx.get()  # type: ignore[attr-defined]
        record.request_id = request_id_ctx.get()  # type: ignore[attr-defined]
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[misc]
    """Custom JSON formatter with operation context."""

    def add_fields(  # type: ignore[override]
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        # Only emit operation context that is actually set
        for field in ("service", "operation", "request_id"):
            value = getattr(record, field, None)
            if value:
                log_record[field] = value
            else:
                log_record.pop(field, None)

        # Ensure level is always present
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging."""
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(OperationContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    # Reduce noise from third-party libraries
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
