"""Successful run data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RunRecord(BaseModel):
    """Append-only record of a successful function run."""

    function_name: str
    business_day: str
    record_count: int
    ran_at: datetime
    project_name: Optional[str] = None
