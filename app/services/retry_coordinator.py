"""
Retry coordinator.

Re-runs the functions behind a business day's open errors and reconciles
each record: successes are deleted, failures go back to pending so the
next notification run announces them again.
"""

from typing import List

from app.models.error import ErrorRecord, ErrorStatus
from app.models.retry import RetryOutcome, RetrySummary
from app.services import messages
from app.services.discord_client import DiscordClient
from app.services.error_records import ErrorRecordRepository
from app.services.job_invoker import JobInvoker
from app.utils.logging import get_logger
from app.utils.metrics import OperationMetrics, emit_metric
from app.utils.resilience import log_partial_failure

logger = get_logger(__name__)


class RetryCoordinator:
    """Drives retry_all for one business day."""

    def __init__(
        self,
        repository: ErrorRecordRepository,
        invoker: JobInvoker,
        chat: DiscordClient,
    ):
        self._repository = repository
        self._invoker = invoker
        self._chat = chat

    async def find_retryable(self, business_day: str) -> List[ErrorRecord]:
        """Open (pending or notified) records of a business day, read in a single attempt."""
        return await self._repository.list_open_for_day(business_day, single_attempt=True)

    async def retry_all(
        self,
        business_day: str,
        errors: List[ErrorRecord],
        token: str,
    ) -> RetrySummary:
        """
        Retry every given record and edit the interaction message with the result.

        Records are flagged retrying up front so a concurrent batch does not
        pick them up as open. Functions are re-run strictly one after
        another; a failed run only affects its own record.

        Args:
            business_day: Day the records belong to
            errors: Records fetched by find_retryable
            token: Follow-up token of the triggering interaction

        Returns:
            The reconciled summary
        """
        ids = [e.id for e in errors]
        await self._repository.mark_status(ids, ErrorStatus.RETRYING, business_day)

        metrics = OperationMetrics("retry_all", business_day=business_day)
        metrics.start()

        outcomes: List[RetryOutcome] = []
        for error in errors:
            log = logger.with_context(function_name=error.function_name, business_day=business_day)
            try:
                succeeded = await self._invoker.invoke(error.function_name, business_day, metrics)
            except Exception as e:
                log.error(f"Unexpected failure retrying {error.function_name}: {e}", exc_info=True)
                succeeded = False

            if succeeded:
                metrics.record_success()
            else:
                metrics.record_failure()
            outcomes.append(
                RetryOutcome(error_id=error.id, function_name=error.function_name, succeeded=succeeded)
            )

        summary = RetrySummary(business_day=business_day, outcomes=outcomes)
        await self._reconcile(summary)

        metrics.complete()
        emit_metric("retries_succeeded", len(summary.succeeded), business_day=business_day)
        emit_metric("retries_failed", len(summary.failed), business_day=business_day)
        log_partial_failure(
            "retry_all",
            total_items=len(outcomes),
            successful_items=len(summary.succeeded),
            failures=[o.function_name for o in summary.failed],
            context={"business_day": business_day},
        )

        await self._chat.try_edit_original_response(token, messages.retry_summary(summary))
        return summary

    async def _reconcile(self, summary: RetrySummary) -> None:
        day = summary.business_day
        succeeded_ids = [o.error_id for o in summary.succeeded]
        failed_ids = [o.error_id for o in summary.failed]

        if not await self._repository.delete_ids(succeeded_ids, day):
            # Records never stay retrying
            failed_ids.extend(succeeded_ids)

        await self._repository.mark_status(failed_ids, ErrorStatus.PENDING, day)
