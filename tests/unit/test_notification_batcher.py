"""
Unit tests for the notification batcher.
"""

import pytest

from app.models.error import ErrorRecord
from app.services.error_records import ErrorRecordRepository
from app.services.notification_batcher import (
    NO_PENDING_MESSAGE,
    UNKNOWN_DATE,
    NotificationBatcher,
    group_by_business_day,
)
from tests.fakes import FakeDiscordClient, FakeRecordStore, error_row

ERRORS = "function_errors"


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def chat() -> FakeDiscordClient:
    return FakeDiscordClient()


@pytest.fixture
def batcher(store, chat) -> NotificationBatcher:
    return NotificationBatcher(ErrorRecordRepository(store), chat)


def statuses(store):
    return {r["function_name"]: r["status"] for r in store.rows(ERRORS)}


def test_group_by_business_day_keeps_order():
    errors = [
        ErrorRecord.model_validate(dict(error_row(name, day), id=i))
        for i, (name, day) in enumerate([("a", "2024-01-05"), ("b", None), ("c", "2024-01-05")])
    ]

    groups = group_by_business_day(errors)

    assert list(groups) == ["2024-01-05", UNKNOWN_DATE]
    assert [e.function_name for e in groups["2024-01-05"]] == ["a", "c"]


@pytest.mark.asyncio
class TestNotificationBatcher:

    async def test_one_announcement_per_day(self, batcher, store, chat):
        store.seed(
            ERRORS,
            error_row("a", "2024-01-05"),
            error_row("b", "2024-01-05"),
            error_row("c", "2024-01-06"),
            error_row("old", "2024-01-04", status="notified"),
        )

        report = await batcher.run()

        assert [(g.date, g.count) for g in report.reported] == [("2024-01-05", 2), ("2024-01-06", 1)]
        assert report.failed is None
        assert len(chat.sent) == 2
        assert chat.sent[0].embeds[0]["title"] == "🚨 Unprocessed errors for 2024-01-05"
        assert statuses(store) == {"a": "notified", "b": "notified", "c": "notified", "old": "notified"}

    async def test_second_run_finds_nothing(self, batcher, store, chat):
        store.seed(ERRORS, error_row("a", "2024-01-05"))

        await batcher.run()
        report = await batcher.run()

        assert report.message == NO_PENDING_MESSAGE
        assert report.reported is None
        assert len(chat.sent) == 1

    async def test_failed_group_stays_pending_and_others_continue(self, batcher, store, chat):
        store.seed(
            ERRORS,
            error_row("a", "2024-01-05"),
            error_row("b", "2024-01-06"),
        )
        chat.fail_send_calls = {0}

        report = await batcher.run()

        assert [g.date for g in report.reported] == ["2024-01-06"]
        assert [g.date for g in report.failed] == ["2024-01-05"]
        assert statuses(store) == {"a": "pending", "b": "notified"}

    async def test_failed_status_update_keeps_records_pending(self, batcher, store, chat):
        store.seed(ERRORS, error_row("a", "2024-01-05"))
        store.fail("update", ERRORS)

        report = await batcher.run()

        assert [g.date for g in report.reported] == ["2024-01-05"]
        assert statuses(store) == {"a": "pending"}

    async def test_records_without_business_day(self, batcher, store, chat):
        store.seed(ERRORS, error_row("a", None))

        report = await batcher.run()

        assert report.reported[0].date == UNKNOWN_DATE
