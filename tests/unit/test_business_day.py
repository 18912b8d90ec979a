"""
Unit tests for business day resolution.
"""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request

from app.utils.business_day import (
    business_day_for_request,
    next_day,
    parse_business_day,
    resolve_business_day,
    yesterday,
)

NOW = datetime(2024, 3, 2, 10, 30, tzinfo=timezone.utc)


def make_request(headers=None, query_string=b""):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/jobs/test-alert",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "query_string": query_string,
    }
    return Request(scope)


class TestYesterday:

    def test_previous_utc_day(self):
        assert yesterday(NOW) == "2024-03-01"

    def test_leap_day(self):
        assert yesterday(datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)) == "2024-02-29"

    def test_year_boundary(self):
        assert yesterday(datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == "2023-12-31"

    def test_other_timezones_are_converted_to_utc(self):
        # 2024-03-02 01:00 at UTC+3 is still 2024-03-01 in UTC
        now = datetime(2024, 3, 2, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert yesterday(now) == "2024-02-29"

    def test_naive_datetime_is_utc(self):
        assert yesterday(datetime(2024, 3, 2, 23, 59)) == "2024-03-01"


class TestResolveBusinessDay:

    def test_defaults_to_yesterday(self):
        assert resolve_business_day(now=NOW) == "2024-03-01"

    def test_header_takes_precedence(self):
        assert resolve_business_day("2024-01-05", "2024-02-10", NOW) == "2024-01-05"

    def test_query_used_without_header(self):
        assert resolve_business_day(None, "2024-02-10", NOW) == "2024-02-10"

    def test_invalid_header_falls_back_to_query(self):
        assert resolve_business_day("05/01/2024", "2024-02-10", NOW) == "2024-02-10"

    def test_invalid_overrides_fall_back_to_yesterday(self):
        assert resolve_business_day("2024-02-30", "garbage", NOW) == "2024-03-01"


def test_parse_business_day_rejects_impossible_dates():
    assert parse_business_day("2024-02-30") is None
    assert parse_business_day("") is None
    assert parse_business_day("2024-02-29").isoformat() == "2024-02-29"


def test_next_day():
    assert next_day("2024-02-29") == "2024-03-01"
    assert next_day("2023-12-31") == "2024-01-01"
    with pytest.raises(ValueError):
        next_day("not-a-date")


def test_business_day_for_request_reads_header():
    request = make_request({"X-Business-Day": "2024-01-05"}, b"business_day=2024-02-10")
    assert business_day_for_request(request, NOW) == "2024-01-05"


def test_business_day_for_request_reads_query():
    request = make_request(query_string=b"business_day=2024-02-10")
    assert business_day_for_request(request, NOW) == "2024-02-10"


def test_business_day_for_request_default():
    assert business_day_for_request(make_request(), NOW) == "2024-03-01"
