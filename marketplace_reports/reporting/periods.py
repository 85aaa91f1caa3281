"""
Period Bucketing

Maps record timestamps to calendar bucket labels. Two key schemes exist:

- bucket_key: sortable keys ("2024", "2024-03", "2024-W12", "2024-03-14")
  used by the cumulative buyer/seller growth series.
- sales_trend_key: display labels ("14:00", "3/14/2024", "March") used by
  the sales trend chart.
"""

import calendar
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Union

Timestamp = Union[str, datetime]

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class Granularity(str, Enum):
    """Bucket granularity for growth series"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReportRange(str, Enum):
    """Time range of a sales report"""
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def parse_timestamp(value: Timestamp) -> datetime:
    """Parse an ISO-8601 string (a trailing 'Z' is accepted) or pass a datetime through."""
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def bucket_key(timestamp: Timestamp, granularity: Union[Granularity, str]) -> str:
    """
    Map a timestamp to its bucket key.

    Uses the timestamp's own calendar fields (no timezone conversion).
    Weekly keys follow ISO-8601 week numbering, so late-December dates can
    land in week 1 of the following ISO year.

    Raises:
        ValueError: unknown granularity
    """
    granularity = Granularity(granularity)
    dt = parse_timestamp(timestamp)

    if granularity == Granularity.YEARLY:
        return f"{dt.year:04d}"
    if granularity == Granularity.MONTHLY:
        return f"{dt.year:04d}-{dt.month:02d}"
    if granularity == Granularity.WEEKLY:
        iso_year, iso_week, _ = dt.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"


def to_local(dt: datetime, tz: tzinfo) -> datetime:
    """Convert aware datetimes to ``tz``; naive ones are taken as already local."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz)


def sales_trend_key(timestamp: Timestamp, report_range: Union[ReportRange, str], tz: tzinfo = timezone.utc) -> str:
    """Display label of the sales trend bucket containing ``timestamp``."""
    report_range = ReportRange(report_range)
    local = to_local(parse_timestamp(timestamp), tz)

    if report_range == ReportRange.DAILY:
        return f"{local.hour}:00"
    if report_range == ReportRange.MONTHLY:
        return f"{local.month}/{local.day}/{local.year}"
    return month_name(local.month)


def month_name(month: int) -> str:
    """English name of a 1-based month number."""
    return MONTH_NAMES[month - 1]


def shift_months(dt: datetime, months: int) -> datetime:
    """Move ``dt`` by whole calendar months, clamping the day to the target month's length."""
    index = dt.year * 12 + (dt.month - 1) + months
    year, month0 = divmod(index, 12)
    day = min(dt.day, calendar.monthrange(year, month0 + 1)[1])
    return dt.replace(year=year, month=month0 + 1, day=day)


def trend_window_start(report_range: Union[ReportRange, str], now: datetime) -> datetime:
    """Lower bound on order creation time for a sales trend."""
    report_range = ReportRange(report_range)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if report_range == ReportRange.DAILY:
        return now - timedelta(hours=24)
    if report_range == ReportRange.MONTHLY:
        return shift_months(now, -1)
    return shift_months(now, -12)
