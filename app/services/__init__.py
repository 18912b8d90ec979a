"""
Services for the function error monitor.
"""

from app.services.audit_aggregator import AuditAggregator
from app.services.discord_client import ChatPlatformError, DiscordClient
from app.services.error_capture import ErrorCaptureGateway
from app.services.error_records import ErrorRecordRepository
from app.services.interaction_orchestrator import InteractionOrchestrator
from app.services.job_invoker import JobInvoker
from app.services.notification_batcher import NotificationBatcher
from app.services.record_store import RecordStoreClient, RecordStoreError
from app.services.retry_coordinator import RetryCoordinator

__all__ = [
    "AuditAggregator",
    "ChatPlatformError",
    "DiscordClient",
    "ErrorCaptureGateway",
    "ErrorRecordRepository",
    "InteractionOrchestrator",
    "JobInvoker",
    "NotificationBatcher",
    "RecordStoreClient",
    "RecordStoreError",
    "RetryCoordinator",
]
