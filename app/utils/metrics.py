"""
Metrics collection and emission for observability.

This module provides metrics tracking for:
- Remediation operation duration (notification batches, retry batches)
- Per-item success and failure counts
- Outbound API call latency
"""

import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextlib import asynccontextmanager

from app.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class OperationMetrics:
    """
    Collects metrics for one remediation operation.

    Tracks:
    - Operation start/end time
    - Items processed, succeeded and failed
    - API call counts and latency
    """

    def __init__(self, operation: str, **tags: Any):
        """
        Initialize metrics collector.

        Args:
            operation: Operation name (e.g. 'notify_batch', 'retry_all')
            **tags: Identifying tags such as business_day
        """
        self.operation = operation
        self.tags = tags

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        self.succeeded: int = 0
        self.failed: int = 0

        self.api_calls: Dict[str, int] = {}
        self.api_latencies: Dict[str, list[float]] = {}

    def start(self) -> None:
        """Mark operation start."""
        self.start_time = datetime.now(timezone.utc)

    def complete(self) -> None:
        """Mark operation completion and emit a summary log line."""
        self.end_time = datetime.now(timezone.utc)
        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Operation {self.operation} completed",
            extra=self.get_metrics_summary()
        )

    def record_success(self, count: int = 1) -> None:
        self.succeeded += count

    def record_failure(self, count: int = 1) -> None:
        self.failed += count

    def record_api_call(self, service: str, duration_ms: float) -> None:
        """
        Record API call and latency.

        Args:
            service: Service name (e.g., 'record_store', 'discord')
            duration_ms: Call duration in milliseconds
        """
        self.api_calls[service] = self.api_calls.get(service, 0) + 1
        self.api_latencies.setdefault(service, []).append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary: Dict[str, Any] = {
            "operation": self.operation,
            "tags": self.tags,
            "duration_ms": self.duration_ms,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "api_calls": self.api_calls,
        }

        if self.api_latencies:
            summary["api_latencies"] = {
                service: {
                    "count": len(latencies),
                    "min_ms": round(min(latencies), 2),
                    "max_ms": round(max(latencies), 2),
                    "avg_ms": round(sum(latencies) / len(latencies), 2),
                }
                for service, latencies in self.api_latencies.items()
                if latencies
            }

        return summary


@asynccontextmanager
async def track_api_call(
    metrics_collector: Optional[OperationMetrics],
    service: str,
    logger_adapter,
    method: str = "",
    endpoint: str = "",
):
    """
    Context manager to track API call timing.

    Usage:
        async with track_api_call(None, "record_store", logger, "GET", url):
            response = await client.get(url)

    Args:
        metrics_collector: Metrics collector (optional)
        service: Service name
        logger_adapter: Logger for logging API calls
        method: HTTP method
        endpoint: Endpoint path

    Yields:
        A dict the caller may fill with ``status_code`` before exiting
    """
    start_time = time.monotonic()
    call_info: Dict[str, Any] = {}
    error = None

    try:
        yield call_info
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.monotonic() - start_time) * 1000

        if metrics_collector:
            metrics_collector.record_api_call(service, duration_ms)

        log_api_call(
            logger_adapter,
            service=service,
            endpoint=endpoint,
            method=method,
            status_code=call_info.get("status_code"),
            duration_ms=duration_ms,
            error=str(error) if error else None
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric.

    Metrics are written as structured log lines so any log-based
    pipeline can aggregate them.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
