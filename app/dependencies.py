"""
FastAPI dependency providers.

Components are built per request from the process-wide Settings, so no
business logic reads the environment and no mutable state is shared
between requests.
"""

from fastapi import Depends

from app.config import Settings, get_settings
from app.services.audit_aggregator import AuditAggregator
from app.services.discord_client import DiscordClient
from app.services.error_capture import ErrorCaptureGateway
from app.services.error_records import ErrorRecordRepository
from app.services.interaction_orchestrator import InteractionOrchestrator
from app.services.job_invoker import JobInvoker
from app.services.notification_batcher import NotificationBatcher
from app.services.record_store import RecordStoreClient
from app.services.retry_coordinator import RetryCoordinator


def get_record_store(settings: Settings = Depends(get_settings)) -> RecordStoreClient:
    return RecordStoreClient.from_settings(settings)


def get_discord_client(settings: Settings = Depends(get_settings)) -> DiscordClient:
    return DiscordClient.from_settings(settings)


def get_job_invoker(settings: Settings = Depends(get_settings)) -> JobInvoker:
    return JobInvoker.from_settings(settings)


def get_repository(
    settings: Settings = Depends(get_settings),
    store: RecordStoreClient = Depends(get_record_store),
) -> ErrorRecordRepository:
    return ErrorRecordRepository.from_settings(settings, store)


def get_error_gateway(
    settings: Settings = Depends(get_settings),
    repository: ErrorRecordRepository = Depends(get_repository),
) -> ErrorCaptureGateway:
    return ErrorCaptureGateway.from_settings(settings, repository)


def get_notification_batcher(
    repository: ErrorRecordRepository = Depends(get_repository),
    chat: DiscordClient = Depends(get_discord_client),
) -> NotificationBatcher:
    return NotificationBatcher(repository, chat)


def get_interaction_orchestrator(
    repository: ErrorRecordRepository = Depends(get_repository),
    chat: DiscordClient = Depends(get_discord_client),
    invoker: JobInvoker = Depends(get_job_invoker),
) -> InteractionOrchestrator:
    return InteractionOrchestrator(
        repository,
        RetryCoordinator(repository, invoker, chat),
        AuditAggregator(repository, chat),
    )
