"""Tests for UTC and calendar-date helpers."""

import pytest
from datetime import date, datetime, timezone

from utils.timezone import default_due_date, format_api_date, now_utc, parse_calendar_date, today_utc


class TestNowUtc:

    def test_is_timezone_aware_utc(self):
        assert now_utc().tzinfo == timezone.utc

    def test_today_matches_now(self):
        assert today_utc() == now_utc().date()


class TestParseCalendarDate:

    def test_iso_string(self):
        assert parse_calendar_date("2026-03-01") == date(2026, 3, 1)

    def test_whitespace_trimmed(self):
        assert parse_calendar_date(" 2026-03-01 ") == date(2026, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "2026-02-30", "03/01/2026", "tomorrow",
                                       "20260301", "2026-W09-7", "2026-060", "2026-3-1", "2026-03-01T00:00"])
    def test_invalid_returns_none(self, value):
        assert parse_calendar_date(value) is None

    def test_date_and_datetime_pass_through(self):
        assert parse_calendar_date(date(2026, 3, 1)) == date(2026, 3, 1)
        assert parse_calendar_date(datetime(2026, 3, 1, 23, 0, tzinfo=timezone.utc)) == date(2026, 3, 1)


class TestFormDates:

    def test_format_api_date(self):
        assert format_api_date(date(2026, 3, 1)) == "2026-03-01"

    def test_default_due_date_is_thirty_days_out(self):
        assert default_due_date(date(2026, 12, 15)) == date(2027, 1, 14)

    def test_custom_term(self):
        assert default_due_date(date(2026, 3, 1), term_days=60) == date(2026, 4, 30)
