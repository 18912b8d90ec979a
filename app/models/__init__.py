"""Data models for the function error monitor."""

from .api_response import BatchReport, JobFailureResponse, ReportedGroup
from .audit import (
    AuditConfig,
    AuditLine,
    AuditLineStatus,
    AuditReport,
    DateColumnType,
)
from .error import OPEN_STATUSES, ErrorRecord, ErrorRecordCreate, ErrorStatus
from .interaction import (
    Interaction,
    InteractionData,
    InteractionResponse,
    InteractionResponseType,
    InteractionType,
    MessagePayload,
)
from .retry import RetryClassification, RetryOutcome, RetrySummary
from .run import RunRecord

__all__ = [
    # Error models
    "ErrorStatus",
    "ErrorRecord",
    "ErrorRecordCreate",
    "OPEN_STATUSES",
    # Run models
    "RunRecord",
    # Audit models
    "DateColumnType",
    "AuditConfig",
    "AuditLineStatus",
    "AuditLine",
    "AuditReport",
    # Interaction models
    "InteractionType",
    "InteractionResponseType",
    "InteractionData",
    "Interaction",
    "MessagePayload",
    "InteractionResponse",
    # Retry models
    "RetryClassification",
    "RetryOutcome",
    "RetrySummary",
    # API response models
    "ReportedGroup",
    "BatchReport",
    "JobFailureResponse",
]
