"""
Structured JSON logging.

Every log line is a single JSON object. Remediation context
(function_name, business_day, error_id, interaction_type, request_id) is
lifted to the top level so log queries can filter on it directly; any other
``extra`` field is nested under ``context``.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, MutableMapping, Optional


PROMOTED_FIELDS = (
    "function_name",
    "business_day",
    "error_id",
    "interaction_type",
    "request_id",
)

# Attributes every LogRecord carries; never treated as context
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """
    Render log records as JSON.

    Output fields: timestamp (ISO 8601, UTC), level, logger, message, the
    promoted context fields, ``context`` for remaining extras, ``error`` when
    exception info is attached, and ``source``.
    """

    def format(self, record: LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in PROMOTED_FIELDS:
                log_data[key] = value
            elif key not in _RESERVED_ATTRS:
                context[key] = value
        if context:
            log_data["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data["error"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "stack_trace": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps its bound context onto every record."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        # Bound context wins over per-call extras of the same name
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """Return a child adapter with ``context`` bound on top of this one's."""
        return ContextLoggerAdapter(self.logger, {**self.extra, **context})


def setup_logging(log_level: str = "INFO") -> None:
    """
    Route all logging through a single JSON handler on stdout.

    Args:
        log_level: Root log level name (DEBUG, INFO, WARNING, ...)
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Outbound calls are already logged by log_api_call
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a module logger, optionally with bound context.

    Example:
        logger = get_logger(__name__, function_name="sync-orders")
        logger.info("Retrying")  # carries function_name
    """
    return ContextLoggerAdapter(logging.getLogger(name), context)


def log_status_transition(
    logger: logging.LoggerAdapter,
    error_ids: list,
    status: str,
    business_day: Optional[str] = None,
) -> None:
    """
    Log an error-record status change.

    Args:
        logger: Logger to use
        error_ids: Record ids that moved
        status: New status ('notified', 'retrying', 'pending', 'deleted')
        business_day: Business day the records belong to, if known
    """
    extra: Dict[str, Any] = {"error_ids": error_ids, "status": status}
    if business_day is not None:
        extra["business_day"] = business_day
    logger.info(f"Error records moved to {status}: {len(error_ids)}", extra=extra)


def log_api_call(
    logger: logging.LoggerAdapter,
    service: str,
    endpoint: str,
    method: str,
    status_code: Optional[int] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None
) -> None:
    """
    Log one outbound call to the record store, Discord or a function.

    Calls that raised are logged at ERROR; everything else at INFO, whatever
    the status code.
    """
    extra: Dict[str, Any] = {"service": service, "endpoint": endpoint, "method": method}
    if status_code is not None:
        extra["status_code"] = status_code
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    if error:
        extra["error"] = error
        logger.error(f"{service} call failed: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"{service} call: {method} {endpoint}", extra=extra)


def log_error_with_context(
    logger: logging.LoggerAdapter,
    message: str,
    error: Exception,
    **context: Any
) -> None:
    """Log ``error`` with its stack trace and the given context fields."""
    logger.error(
        message,
        extra={**context, "error_type": type(error).__name__},
        exc_info=error,
    )
