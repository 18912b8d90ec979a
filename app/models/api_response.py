"""API response data models."""

from typing import List, Optional

from pydantic import BaseModel


class ReportedGroup(BaseModel):
    """Errors of one business day handled by a notification run."""

    date: str
    count: int


class BatchReport(BaseModel):
    """Response from the notification batch endpoint."""

    reported: Optional[List[ReportedGroup]] = None
    failed: Optional[List[ReportedGroup]] = None
    message: Optional[str] = None


class JobFailureResponse(BaseModel):
    """Generic body returned when a monitored function fails."""

    error: str = "Internal Server Error"
    function_name: str
