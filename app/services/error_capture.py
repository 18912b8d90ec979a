"""
Error capture gateway.

Wraps the request handler of a monitored function. Failures are filed as
pending error records and answered with a generic 500, so internal detail
only reaches the alerting trail. Successful runs can be recorded with the
number of records they processed.
"""

import traceback
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse

from app.config import Settings
from app.models.api_response import JobFailureResponse
from app.models.error import ErrorRecordCreate
from app.models.run import RunRecord
from app.services.error_records import ErrorId, ErrorRecordRepository
from app.utils.business_day import business_day_for_request, yesterday
from app.utils.logging import get_logger, log_error_with_context

logger = get_logger(__name__)

JobHandler = Callable[[Request], Awaitable[Response]]


def describe_exception(exc: BaseException) -> tuple:
    """Normalize an exception into (message, stack) fields."""
    message = str(exc) or type(exc).__name__
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return message, stack


class ErrorCaptureGateway:
    """Captures failures and successes of monitored functions."""

    def __init__(self, repository: ErrorRecordRepository, project_name: str):
        self._repository = repository
        self._project_name = project_name

    @classmethod
    def from_settings(cls, settings: Settings, repository: ErrorRecordRepository) -> "ErrorCaptureGateway":
        return cls(repository, settings.project_name)

    def capture_on(self, job_name: str, handler: JobHandler) -> JobHandler:
        """
        Wrap a function handler with failure capture.

        Args:
            job_name: Name under which failures are filed
            handler: Async handler taking the triggering request

        Returns:
            Handler that files an error record and returns a generic 500
            when the wrapped handler raises
        """

        async def wrapped(request: Request) -> Response:
            try:
                return await handler(request)
            except HTTPException:
                raise
            except Exception as e:
                business_day = business_day_for_request(request)
                log_error_with_context(
                    logger,
                    f"Function {job_name} failed: {e}",
                    e,
                    function_name=job_name,
                    business_day=business_day,
                )
                await self.report_error(job_name, e, business_day)
                return JSONResponse(
                    status_code=500,
                    content=JobFailureResponse(function_name=job_name).model_dump(),
                )

        wrapped.__name__ = getattr(handler, "__name__", job_name)
        return wrapped

    async def report_error(
        self,
        job_name: str,
        error: BaseException,
        business_day: Optional[str] = None,
    ) -> Optional[ErrorId]:
        """
        File a pending error record for a failed function run.

        Args:
            job_name: Function name
            error: The failure
            business_day: Day being processed; defaults to yesterday

        Returns:
            Id of the new record, or None if it could not be filed
        """
        message, stack = describe_exception(error)
        record = ErrorRecordCreate(
            function_name=job_name,
            error_message=message,
            error_stack=stack,
            business_day=business_day or yesterday(),
            occurred_at=datetime.now(timezone.utc),
            project_name=self._project_name,
        )
        return await self._repository.file_error(record)

    async def report_success(
        self,
        job_name: str,
        record_count: int,
        business_day: Optional[str] = None,
    ) -> bool:
        """
        Append a run record for a successful function run.

        Args:
            job_name: Function name, as used with capture_on
            record_count: Number of records the run processed
            business_day: Day processed; defaults to yesterday

        Returns:
            True if the run record was stored
        """
        run = RunRecord(
            function_name=job_name,
            business_day=business_day or yesterday(),
            record_count=record_count,
            ran_at=datetime.now(timezone.utc),
            project_name=self._project_name,
        )
        return await self._repository.record_run(run)
