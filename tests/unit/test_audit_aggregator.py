"""
Unit tests for the audit aggregator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.audit import AuditLineStatus
from app.services import messages
from app.services.audit_aggregator import AuditAggregator
from app.services.error_records import ErrorRecordRepository
from tests.fakes import FakeDiscordClient, FakeRecordStore, error_row

DAY = "2024-01-05"


def config(display_name, target_table, function_name=None, sort_order=0, **extra):
    row = {
        "display_name": display_name,
        "target_table": target_table,
        "function_name": function_name,
        "date_column": "day",
        "date_column_type": "date",
        "is_active": True,
        "sort_order": sort_order,
    }
    row.update(extra)
    return row


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def chat() -> FakeDiscordClient:
    return FakeDiscordClient()


@pytest.fixture
def aggregator(store, chat) -> AuditAggregator:
    return AuditAggregator(ErrorRecordRepository(store), chat)


@pytest.mark.asyncio
class TestBuildReport:

    async def test_counts_errors_and_orphans(self, aggregator, store):
        store.seed(
            "audit_config",
            config("Orders", "orders", "sync-orders", sort_order=1),
            config("Invoices", "invoices", "sync-invoices", sort_order=2),
        )
        store.seed("orders", *({"day": DAY} for _ in range(3)), {"day": "2024-01-04"})
        store.seed("invoices", {"day": DAY})
        store.seed(
            "function_errors",
            error_row("sync-invoices", DAY),
            error_row("sync-invoices", DAY, status="notified"),
            error_row("ingest", DAY),
            error_row("sync-orders", "2024-01-04"),
        )

        report = await aggregator.build_report(DAY)

        by_name = {line.name: line for line in report.lines}
        assert [line.name for line in report.lines] == ["Orders", "Invoices", "ingest"]
        assert by_name["Orders"].status == AuditLineStatus.OK
        assert by_name["Orders"].record_count == 3
        assert by_name["Invoices"].status == AuditLineStatus.WITH_ERRORS
        assert by_name["Invoices"].error_count == 2
        assert by_name["ingest"].status == AuditLineStatus.FAILED
        assert by_name["ingest"].error_count == 1
        assert report.configured is True
        assert report.total_records == 4
        assert report.ok_count == 1
        assert report.error_count == 2

    async def test_errors_being_retried_are_not_counted(self, aggregator, store):
        store.seed("audit_config", config("Invoices", "invoices", "sync-invoices"))
        store.seed("invoices", {"day": DAY})
        store.seed(
            "function_errors",
            error_row("sync-invoices", DAY, status="retrying"),
            error_row("ingest", DAY, status="retrying"),
        )

        report = await aggregator.build_report(DAY)

        assert [line.name for line in report.lines] == ["Invoices"]
        assert report.lines[0].status == AuditLineStatus.OK
        assert report.lines[0].error_count == 0
        assert report.error_count == 0

    async def test_unqueryable_table_is_unknown(self, aggregator, store):
        store.seed("audit_config", config("Payments", "payments"))
        store.fail("count", "payments")

        report = await aggregator.build_report(DAY)

        assert report.lines[0].status == AuditLineStatus.UNKNOWN
        assert report.lines[0].record_count is None
        assert report.error_count == 1

    async def test_timestamp_columns(self, aggregator, store):
        store.seed(
            "audit_config",
            config("Events", "events", date_column="created_at", date_column_type="timestamp"),
        )
        store.seed(
            "events",
            {"created_at": "2024-01-05T00:00:00Z"},
            {"created_at": "2024-01-05T12:30:00Z"},
            {"created_at": "2024-01-06T00:00:00Z"},
        )

        report = await aggregator.build_report(DAY)

        assert report.lines[0].record_count == 2

    async def test_without_configuration(self, aggregator, store):
        store.seed("function_errors", error_row("ingest", DAY))

        report = await aggregator.build_report(DAY)

        assert report.configured is False
        assert [(line.name, line.status) for line in report.lines] == [("ingest", AuditLineStatus.FAILED)]

    async def test_inactive_configuration_is_ignored(self, aggregator, store):
        store.seed("audit_config", config("Legacy", "legacy", is_active=False))

        report = await aggregator.build_report(DAY)

        assert report.configured is False
        assert report.lines == []


@pytest.mark.asyncio
class TestRun:

    async def test_publishes_report_over_original_response(self, aggregator, store, chat):
        store.seed("audit_config", config("Orders", "orders"))
        store.seed("orders", {"day": DAY})

        await aggregator.run("tok", DAY)

        token, message = chat.edits[0]
        assert token == "tok"
        assert "Audit for `2024-01-05`" in message.embeds[0]["description"]
        assert message.embeds[0]["color"] == messages.COLOR_SUCCESS

    async def test_defaults_to_yesterday(self, aggregator, chat):
        report = await aggregator.run("tok")

        expected = (datetime.now(timezone.utc) - timedelta(days=1)).strftime("%Y-%m-%d")
        assert report.business_day == expected

    async def test_failed_edit_does_not_raise(self, aggregator, chat):
        chat.fail_edits = True

        report = await aggregator.run("tok", DAY)

        assert report.business_day == DAY
        assert chat.edits == []
