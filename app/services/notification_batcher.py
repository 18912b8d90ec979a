"""
Notification batcher.

Announces pending error records once per run, one chat message per
business day, and marks announced records as notified.
"""

from typing import Dict, List

from app.models.api_response import BatchReport, ReportedGroup
from app.models.error import ErrorRecord, ErrorStatus
from app.services import messages
from app.services.discord_client import DiscordClient
from app.services.error_records import ErrorRecordRepository
from app.utils.logging import get_logger
from app.utils.metrics import OperationMetrics, emit_metric

logger = get_logger(__name__)

UNKNOWN_DATE = "unknown-date"
NO_PENDING_MESSAGE = "no pending errors"


def group_by_business_day(errors: List[ErrorRecord]) -> Dict[str, List[ErrorRecord]]:
    """Partition records by business day, keeping input order in each group."""
    groups: Dict[str, List[ErrorRecord]] = {}
    for error in errors:
        groups.setdefault(error.business_day or UNKNOWN_DATE, []).append(error)
    return groups


class NotificationBatcher:
    """Batches pending errors into per-day chat announcements."""

    def __init__(self, repository: ErrorRecordRepository, chat: DiscordClient):
        self._repository = repository
        self._chat = chat

    async def run(self) -> BatchReport:
        """
        Announce every pending error.

        Groups are handled one after another. A group whose announcement
        fails is logged and skipped; its records stay pending and are picked
        up by the next run. Records are marked notified only after their
        announcement was sent, so a failed status update can lead to a
        repeated alert but never to a lost one.

        Returns:
            Per-day counts of announced and failed groups
        """
        pending = await self._repository.list_pending()
        if not pending:
            logger.info("No pending errors to announce")
            return BatchReport(message=NO_PENDING_MESSAGE)

        metrics = OperationMetrics("notify_batch")
        metrics.start()

        reported: List[ReportedGroup] = []
        failed: List[ReportedGroup] = []

        for business_day, errors in group_by_business_day(pending).items():
            group = ReportedGroup(date=business_day, count=len(errors))
            try:
                await self._chat.send_channel_message(
                    messages.error_announcement(business_day, errors)
                )
            except Exception as e:
                logger.error(
                    f"Failed to announce {len(errors)} errors for {business_day}: {e}",
                    extra={"business_day": business_day},
                )
                failed.append(group)
                metrics.record_failure()
                continue

            logger.info(
                f"Announced {len(errors)} errors for {business_day}",
                extra={"business_day": business_day},
            )
            await self._repository.mark_status(
                [e.id for e in errors], ErrorStatus.NOTIFIED, business_day
            )
            reported.append(group)
            metrics.record_success()

        metrics.complete()
        emit_metric("errors_announced", sum(g.count for g in reported))
        if failed:
            emit_metric("announcements_failed", len(failed))

        return BatchReport(reported=reported, failed=failed or None)
