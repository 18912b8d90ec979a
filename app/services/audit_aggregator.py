"""
Audit aggregator.

Counts the rows each tracked table received for a business day and
correlates them with the errors filed for that day.
"""

import asyncio
from collections import Counter
from typing import List, Optional

from app.models.audit import AuditLine, AuditLineStatus, AuditReport
from app.services import messages
from app.services.discord_client import DiscordClient
from app.services.error_records import ErrorRecordRepository
from app.utils.business_day import yesterday
from app.utils.logging import get_logger

logger = get_logger(__name__)


class AuditAggregator:
    """Builds and publishes the daily audit report."""

    def __init__(self, repository: ErrorRecordRepository, chat: DiscordClient):
        self._repository = repository
        self._chat = chat

    async def build_report(self, business_day: str) -> AuditReport:
        """
        Aggregate row counts and errors for a business day.

        Table counts run concurrently; a count that cannot be obtained is
        reported as unknown instead of failing the report. Each config row
        linked to a function consumes that function's errors, and errors
        left unconsumed are reported as failures of their own.

        Args:
            business_day: Day to audit (YYYY-MM-DD)

        Returns:
            The aggregated report
        """
        configs, errors = await asyncio.gather(
            self._repository.list_active_audit_configs(),
            self._repository.list_open_for_day(business_day),
        )
        counts = await asyncio.gather(
            *(self._repository.count_rows_for_day(config, business_day) for config in configs)
        )

        errors_by_function = Counter(e.function_name for e in errors)
        lines: List[AuditLine] = []

        for config, count in zip(configs, counts):
            error_count = 0
            if config.function_name:
                error_count = errors_by_function.pop(config.function_name, 0)

            if count is None:
                status = AuditLineStatus.UNKNOWN
            elif error_count:
                status = AuditLineStatus.WITH_ERRORS
            else:
                status = AuditLineStatus.OK

            lines.append(
                AuditLine(
                    name=config.display_name,
                    status=status,
                    record_count=count,
                    error_count=error_count,
                )
            )

        for function_name, error_count in errors_by_function.items():
            lines.append(
                AuditLine(name=function_name, status=AuditLineStatus.FAILED, error_count=error_count)
            )

        report = AuditReport(
            business_day=business_day,
            configured=bool(configs),
            lines=lines,
            total_records=sum(line.record_count or 0 for line in lines),
            ok_count=sum(1 for line in lines if not line.is_error),
            error_count=sum(1 for line in lines if line.is_error),
        )

        logger.info(
            f"Audit built for {business_day}: {report.ok_count} OK, {report.error_count} with errors",
            extra={"business_day": business_day},
        )
        return report

    async def run(self, token: str, business_day: Optional[str] = None) -> AuditReport:
        """
        Build the audit and publish it over the deferred interaction response.

        Args:
            token: Follow-up token of the triggering command
            business_day: Day to audit; defaults to yesterday

        Returns:
            The published report
        """
        day = business_day or yesterday()
        report = await self.build_report(day)
        await self._chat.try_edit_original_response(token, messages.audit_report(report))
        return report
