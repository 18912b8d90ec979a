"""Error tracking data models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel


class ErrorStatus(str, Enum):
    """Lifecycle status of a filed error. Deleted records are resolved."""

    PENDING = "pending"
    NOTIFIED = "notified"
    RETRYING = "retrying"


# Statuses that can still be retried or dismissed from chat
OPEN_STATUSES = (ErrorStatus.PENDING, ErrorStatus.NOTIFIED)


class ErrorRecord(BaseModel):
    """Filed failure of a monitored function."""

    id: Union[int, str]
    function_name: str
    error_message: str = ""
    error_stack: Optional[str] = None
    business_day: Optional[str] = None  # YYYY-MM-DD
    occurred_at: Optional[datetime] = None
    status: ErrorStatus
    project_name: Optional[str] = None
    retried_at: Optional[datetime] = None


class ErrorRecordCreate(BaseModel):
    """Insert payload for a new error record. Always filed as pending."""

    function_name: str
    error_message: str
    error_stack: Optional[str] = None
    business_day: str
    occurred_at: datetime
    project_name: Optional[str] = None
    status: ErrorStatus = ErrorStatus.PENDING
