"""Audit configuration and report data models."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel


class DateColumnType(str, Enum):
    """How a tracked table stores the day its rows belong to."""

    DATE = "date"
    TIMESTAMP = "timestamp"


class AuditConfig(BaseModel):
    """One tracked table in the daily audit."""

    id: Optional[Union[int, str]] = None
    display_name: str
    function_name: Optional[str] = None
    target_table: str
    date_column: str
    date_column_type: DateColumnType = DateColumnType.DATE
    sort_order: int = 0


class AuditLineStatus(str, Enum):
    """Classification of a single audit line."""

    OK = "ok"
    WITH_ERRORS = "with_errors"
    UNKNOWN = "unknown"
    FAILED = "failed"


class AuditLine(BaseModel):
    """A rendered audit line for a config row or an orphan error."""

    name: str
    status: AuditLineStatus
    record_count: Optional[int] = None
    error_count: int = 0

    @property
    def is_error(self) -> bool:
        return self.status != AuditLineStatus.OK


class AuditReport(BaseModel):
    """Aggregated audit for one business day."""

    business_day: str
    configured: bool
    lines: List[AuditLine] = []
    total_records: int = 0
    ok_count: int = 0
    error_count: int = 0
