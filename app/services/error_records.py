"""
Error record repository.

Domain-level reads and writes of error records, run records and audit
configuration on top of RecordStoreClient. Store failures are logged here
and turned into empty / None / False results so that no record store
problem ever propagates to an interaction response.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from app.config import Settings
from app.models.audit import AuditConfig, DateColumnType
from app.models.error import OPEN_STATUSES, ErrorRecord, ErrorRecordCreate, ErrorStatus
from app.models.run import RunRecord
from app.services.record_store import (
    RecordStoreClient,
    RecordStoreError,
    eq,
    gte,
    in_,
    lt,
)
from app.utils.business_day import next_day
from app.utils.logging import get_logger, log_status_transition

logger = get_logger(__name__)

ErrorId = Union[int, str]

ERROR_COLUMNS = (
    "id,function_name,error_message,error_stack,business_day,"
    "occurred_at,status,project_name,retried_at"
)
AUDIT_CONFIG_COLUMNS = (
    "id,display_name,function_name,target_table,date_column,"
    "date_column_type,sort_order"
)


class ErrorRecordRepository:
    """Persistence of error records, run records and audit configuration."""

    def __init__(
        self,
        store: RecordStoreClient,
        error_table: str = "function_errors",
        runs_table: str = "function_runs",
        audit_config_table: str = "audit_config",
    ):
        self._store = store
        self._error_table = error_table
        self._runs_table = runs_table
        self._audit_config_table = audit_config_table

    @classmethod
    def from_settings(cls, settings: Settings, store: RecordStoreClient) -> "ErrorRecordRepository":
        return cls(
            store,
            error_table=settings.error_log_table,
            runs_table=settings.runs_table,
            audit_config_table=settings.audit_config_table,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def file_error(self, record: ErrorRecordCreate) -> Optional[ErrorId]:
        """
        File a new pending error record.

        Returns:
            The store-assigned id, or None if the insert failed
        """
        payload = record.model_dump(mode="json")
        payload["status"] = ErrorStatus.PENDING.value

        try:
            row = await self._store.insert(self._error_table, payload)
        except RecordStoreError as e:
            logger.error(
                f"Failed to file error record for {record.function_name}: {e}",
                extra={"function_name": record.function_name, "business_day": record.business_day},
            )
            return None

        error_id = row.get("id") if row else None
        logger.info(
            f"Filed error record for {record.function_name}",
            extra={
                "function_name": record.function_name,
                "business_day": record.business_day,
                "error_id": error_id,
            },
        )
        return error_id

    async def record_run(self, run: RunRecord) -> bool:
        """Append a successful-run record. Returns False if the insert failed."""
        try:
            await self._store.insert(self._runs_table, run.model_dump(mode="json"), returning=False)
        except RecordStoreError as e:
            logger.error(
                f"Failed to record successful run of {run.function_name}: {e}",
                extra={"function_name": run.function_name, "business_day": run.business_day},
            )
            return False
        return True

    async def mark_status(
        self,
        ids: List[ErrorId],
        status: ErrorStatus,
        business_day: Optional[str] = None,
    ) -> bool:
        """
        Overwrite the status of the given records.

        Moves into or out of a retry also stamp ``retried_at``.

        Returns:
            True if the store accepted the update (or there was nothing to do)
        """
        if not ids:
            return True

        values = {"status": status.value}
        if status != ErrorStatus.NOTIFIED:
            values["retried_at"] = datetime.now(timezone.utc).isoformat()

        try:
            await self._store.update(self._error_table, [in_("id", ids)], values)
        except RecordStoreError as e:
            logger.error(
                f"Failed to mark {len(ids)} error records as {status.value}: {e}",
                extra={"error_ids": ids, "business_day": business_day},
            )
            return False

        log_status_transition(logger, ids, status.value, business_day)
        return True

    async def delete_ids(self, ids: List[ErrorId], business_day: Optional[str] = None) -> bool:
        """Delete resolved records by id."""
        if not ids:
            return True

        try:
            await self._store.delete(self._error_table, [in_("id", ids)])
        except RecordStoreError as e:
            logger.error(
                f"Failed to delete {len(ids)} resolved error records: {e}",
                extra={"error_ids": ids, "business_day": business_day},
            )
            return False

        log_status_transition(logger, ids, "deleted", business_day)
        return True

    async def delete_open_for_day(self, business_day: str) -> bool:
        """Dismiss every pending or notified record of a business day."""
        try:
            await self._store.delete(
                self._error_table,
                [
                    eq("business_day", business_day),
                    in_("status", [s.value for s in OPEN_STATUSES]),
                ],
            )
        except RecordStoreError as e:
            logger.error(
                f"Failed to dismiss errors for {business_day}: {e}",
                extra={"business_day": business_day},
            )
            return False

        logger.info(f"Dismissed open errors for {business_day}", extra={"business_day": business_day})
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_pending(self) -> List[ErrorRecord]:
        """All pending records, oldest business day first, then by occurrence."""
        return await self._list_errors(
            [eq("status", ErrorStatus.PENDING.value)],
            order=["business_day.asc", "occurred_at.asc"],
        )

    async def list_open_for_day(self, business_day: str, single_attempt: bool = False) -> List[ErrorRecord]:
        """
        Pending or notified records of a business day.

        With ``single_attempt`` the read is made once under the store's
        interactive timeout instead of with retries.
        """
        return await self._list_errors(
            [
                eq("business_day", business_day),
                in_("status", [s.value for s in OPEN_STATUSES]),
            ],
            order=["occurred_at.asc"],
            single_attempt=single_attempt,
        )

    async def list_active_audit_configs(self) -> List[AuditConfig]:
        """Active audit configuration rows ordered by sort_order."""
        try:
            rows = await self._store.select(
                self._audit_config_table,
                [eq("is_active", "true")],
                columns=AUDIT_CONFIG_COLUMNS,
                order=["sort_order.asc"],
            )
        except RecordStoreError as e:
            logger.error(f"Failed to load audit configuration: {e}")
            return []

        configs = []
        for row in rows:
            try:
                configs.append(AuditConfig.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid audit configuration row {row.get('id')}: {e}")
        return configs

    async def count_rows_for_day(self, config: AuditConfig, business_day: str) -> Optional[int]:
        """
        Count rows of a tracked table that belong to a business day.

        Date columns match the day exactly; timestamp columns match the
        half-open UTC range [day, day + 1).

        Returns:
            Row count, or None if the count could not be obtained
        """
        if config.date_column_type == DateColumnType.TIMESTAMP:
            filters = [
                gte(config.date_column, f"{business_day}T00:00:00Z"),
                lt(config.date_column, f"{next_day(business_day)}T00:00:00Z"),
            ]
        else:
            filters = [eq(config.date_column, business_day)]

        try:
            return await self._store.count(config.target_table, filters)
        except RecordStoreError as e:
            logger.warning(
                f"Failed to count rows in {config.target_table} for {business_day}: {e}",
                extra={"business_day": business_day, "function_name": config.function_name},
            )
            return None

    async def _list_errors(
        self,
        filters: Iterable,
        order: List[str],
        single_attempt: bool = False,
    ) -> List[ErrorRecord]:
        select = self._store.select_once if single_attempt else self._store.select
        try:
            rows = await select(
                self._error_table, filters, columns=ERROR_COLUMNS, order=order
            )
        except RecordStoreError as e:
            logger.error(f"Failed to read error records: {e}")
            return []

        records = []
        for row in rows:
            try:
                records.append(ErrorRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed error record {row.get('id')}: {e}")
        return records
