"""Retry outcome data models."""

from enum import Enum
from typing import List, Union

from pydantic import BaseModel


class RetryClassification(str, Enum):
    """Overall result of a retry batch."""

    FULL_SUCCESS = "full_success"
    FULL_FAILURE = "full_failure"
    PARTIAL = "partial"


class RetryOutcome(BaseModel):
    """Result of re-invoking the function behind one error record."""

    error_id: Union[int, str]
    function_name: str
    succeeded: bool


class RetrySummary(BaseModel):
    """Reconciled result of a retry batch for one business day."""

    business_day: str
    outcomes: List[RetryOutcome] = []

    @property
    def succeeded(self) -> List[RetryOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[RetryOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def classification(self) -> RetryClassification:
        if not self.failed:
            return RetryClassification.FULL_SUCCESS
        if not self.succeeded:
            return RetryClassification.FULL_FAILURE
        return RetryClassification.PARTIAL
