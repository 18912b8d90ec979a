"""
Business day resolution.

Jobs process the previous calendar day's data by convention, so the
business day of a run defaults to "yesterday" in UTC. Retries pass the
original day explicitly so a job re-run days later recomputes the same
date it failed on.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from starlette.requests import Request

from app.utils.logging import get_logger

logger = get_logger(__name__)

BUSINESS_DAY_HEADER = "X-Business-Day"
BUSINESS_DAY_QUERY_PARAM = "business_day"
DATE_FORMAT = "%Y-%m-%d"


def parse_business_day(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, returning None when it is not a real date."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def format_business_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def yesterday(now: Optional[datetime] = None) -> str:
    """
    Return the default business day: the UTC calendar day before ``now``.

    Args:
        now: Reference instant; naive values are treated as UTC

    Returns:
        Date string in YYYY-MM-DD format
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_business_day(now.astimezone(timezone.utc).date() - timedelta(days=1))


def next_day(business_day: str) -> str:
    """Return the calendar day after ``business_day`` (YYYY-MM-DD)."""
    parsed = parse_business_day(business_day)
    if parsed is None:
        raise ValueError(f"Invalid business day: {business_day!r}")
    return format_business_day(parsed + timedelta(days=1))


def resolve_business_day(
    header_value: Optional[str] = None,
    query_value: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Resolve the business day for a request.

    Priority: explicit header override, then query parameter override,
    then yesterday (UTC). Overrides that are not valid dates are skipped.

    Args:
        header_value: Value of the X-Business-Day header
        query_value: Value of the business_day query parameter
        now: Reference instant for the default

    Returns:
        Date string in YYYY-MM-DD format
    """
    for source, value in (("header", header_value), ("query", query_value)):
        if not value:
            continue
        parsed = parse_business_day(value)
        if parsed is not None:
            return format_business_day(parsed)
        logger.warning(
            f"Ignoring invalid business day override from {source}: {value!r}"
        )

    return yesterday(now)


def business_day_for_request(request: Request, now: Optional[datetime] = None) -> str:
    """Resolve the business day from a request's header and query string."""
    return resolve_business_day(
        request.headers.get(BUSINESS_DAY_HEADER),
        request.query_params.get(BUSINESS_DAY_QUERY_PARAM),
        now,
    )
