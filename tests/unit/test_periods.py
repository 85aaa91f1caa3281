"""
Unit Tests - Period Bucketing
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from marketplace_reports.reporting.periods import (
    Granularity,
    ReportRange,
    bucket_key,
    month_name,
    parse_timestamp,
    sales_trend_key,
    shift_months,
    trend_window_start,
)


class TestBucketKey:
    """Tests for bucket_key"""

    def test_yearly_monthly_daily(self):
        ts = "2024-03-05T14:30:00Z"

        assert bucket_key(ts, Granularity.YEARLY) == "2024"
        assert bucket_key(ts, Granularity.MONTHLY) == "2024-03"
        assert bucket_key(ts, Granularity.DAILY) == "2024-03-05"

    def test_weekly_zero_padded(self):
        assert bucket_key("2024-03-05T00:00:00Z", "weekly") == "2024-W10"

    @pytest.mark.parametrize("ts,expected", [
        ("2024-12-30T00:00:00Z", "2025-W01"),
        ("2024-12-31T00:00:00Z", "2025-W01"),
        ("2021-01-03T10:00:00Z", "2020-W53"),
        ("2027-01-01T00:00:00Z", "2026-W53"),
    ])
    def test_weekly_uses_iso_year(self, ts, expected):
        """Late-December and early-January dates follow ISO week numbering"""
        assert bucket_key(ts, Granularity.WEEKLY) == expected

    def test_datetime_and_string_agree(self):
        dt = datetime(2024, 7, 1, 8, 0, tzinfo=timezone.utc)

        for granularity in Granularity:
            assert bucket_key(dt, granularity) == bucket_key("2024-07-01T08:00:00Z", granularity)

    def test_no_timezone_conversion(self):
        """Calendar fields are read as given"""
        assert bucket_key("2024-03-05T23:30:00-05:00", Granularity.DAILY) == "2024-03-05"

    def test_unknown_granularity(self):
        with pytest.raises(ValueError):
            bucket_key("2024-03-05T00:00:00Z", "hourly")

    def test_keys_sort_chronologically(self):
        stamps = ["2023-12-31", "2024-01-02", "2024-02-15", "2024-11-30"]

        for granularity in Granularity:
            keys = [bucket_key(ts, granularity) for ts in stamps]
            assert keys == sorted(keys)


class TestSalesTrendKey:
    """Tests for sales_trend_key"""

    def test_daily_hour_label(self):
        assert sales_trend_key("2024-03-05T14:30:00Z", ReportRange.DAILY) == "14:00"
        assert sales_trend_key("2024-03-05T09:05:00Z", ReportRange.DAILY) == "9:00"

    def test_monthly_date_label(self):
        assert sales_trend_key("2024-03-05T14:30:00Z", ReportRange.MONTHLY) == "3/5/2024"

    def test_yearly_month_name(self):
        assert sales_trend_key("2024-03-05T14:30:00Z", ReportRange.YEARLY) == "March"

    def test_converts_to_report_timezone(self):
        colombo = ZoneInfo("Asia/Colombo")
        ts = "2024-03-05T20:30:00Z"

        assert sales_trend_key(ts, ReportRange.DAILY, colombo) == "2:00"
        assert sales_trend_key(ts, ReportRange.MONTHLY, colombo) == "3/6/2024"

    def test_weekly_is_not_a_report_range(self):
        with pytest.raises(ValueError):
            sales_trend_key("2024-03-05T14:30:00Z", "weekly")


class TestTrendWindow:
    """Tests for trend_window_start"""

    def test_daily_is_last_24_hours(self):
        now = datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)

        assert trend_window_start(ReportRange.DAILY, now) == now - timedelta(hours=24)

    def test_monthly_clamps_to_month_end(self):
        now = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)

        assert trend_window_start(ReportRange.MONTHLY, now) == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)

    def test_yearly_from_leap_day(self):
        now = datetime(2024, 2, 29, tzinfo=timezone.utc)

        assert trend_window_start(ReportRange.YEARLY, now) == datetime(2023, 2, 28, tzinfo=timezone.utc)

    def test_naive_now_is_utc(self):
        start = trend_window_start("daily", datetime(2024, 3, 14, 12, 0))

        assert start.tzinfo == timezone.utc
        assert start == datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc)


class TestHelpers:
    """Tests for small period helpers"""

    def test_parse_timestamp_z_suffix(self):
        assert parse_timestamp("2024-03-05T14:30:00Z") == datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)

    def test_parse_timestamp_passes_datetime(self):
        dt = datetime(2024, 3, 5)
        assert parse_timestamp(dt) is dt

    def test_shift_months_across_year(self):
        assert shift_months(datetime(2024, 1, 15), -1) == datetime(2023, 12, 15)
        assert shift_months(datetime(2023, 11, 30), 3) == datetime(2024, 2, 29)

    def test_month_name(self):
        assert month_name(1) == "January"
        assert month_name(12) == "December"
