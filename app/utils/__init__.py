"""
Utility modules for the function error monitor.
"""

from app.utils.logging import (
    get_logger,
    setup_logging,
    log_status_transition,
    log_api_call,
    log_error_with_context,
)
from app.utils.metrics import (
    OperationMetrics,
    track_api_call,
    emit_metric,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_status_transition",
    "log_api_call",
    "log_error_with_context",
    "OperationMetrics",
    "track_api_call",
    "emit_metric",
]
