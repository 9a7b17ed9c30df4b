"""
Unit Tests - Report Periods
"""
from datetime import date, datetime

import pytest

from retail_stats.statistics.periods import (
    DateWindow,
    Period,
    parse_period,
    resolve_open_window,
    resolve_window,
    shift_years,
    start_of_week,
)

NOW = datetime(2026, 4, 15, 12, 0)


class TestParsePeriod:
    """Tests for period token normalisation"""

    @pytest.mark.parametrize("token", ["day", "DAY", " Day ", "today"])
    def test_day_tokens(self, token):
        assert parse_period(token) is Period.DAY

    @pytest.mark.parametrize("token,expected", [
        ("lastmonth", Period.LAST_MONTH),
        ("last_month", Period.LAST_MONTH),
        ("LastYear", Period.LAST_YEAR),
        ("last_year", Period.LAST_YEAR),
    ])
    def test_previous_period_tokens(self, token, expected):
        assert parse_period(token) is expected

    @pytest.mark.parametrize("token", ["fortnight", "", None, "quarter"])
    def test_unknown_tokens_fall_back_to_month(self, token):
        assert parse_period(token) is Period.MONTH

    @pytest.mark.parametrize("token", [5, 3.5, ["day"]])
    def test_non_string_tokens_fall_back_to_month(self, token):
        assert parse_period(token) is Period.MONTH

    def test_disallowed_token_falls_back_to_month(self):
        allowed = (Period.DAY, Period.WEEK, Period.MONTH, Period.YEAR)
        assert parse_period("lastyear", allowed=allowed) is Period.MONTH


class TestResolveWindow:
    """Tests for the revenue report windows"""

    def test_day_ends_now(self):
        window = resolve_window("day", NOW)
        assert window == DateWindow(datetime(2026, 4, 15), NOW)

    def test_week_starts_on_monday(self):
        window = resolve_window("week", NOW)
        assert window == DateWindow(datetime(2026, 4, 13), NOW)

    def test_week_on_a_monday_starts_that_day(self):
        monday = datetime(2026, 4, 13, 8, 30)
        assert resolve_window("week", monday).start == datetime(2026, 4, 13)

    def test_week_on_a_sunday_starts_six_days_earlier(self):
        sunday = datetime(2026, 4, 19, 23, 0)
        assert resolve_window("week", sunday).start == datetime(2026, 4, 13)

    def test_month_covers_whole_month(self):
        window = resolve_window("month", NOW)
        assert window == DateWindow(datetime(2026, 4, 1), datetime(2026, 5, 1))

    def test_month_in_december_ends_next_year(self):
        window = resolve_window("month", datetime(2026, 12, 10))
        assert window == DateWindow(datetime(2026, 12, 1), datetime(2027, 1, 1))

    def test_year_covers_whole_year(self):
        window = resolve_window("year", NOW)
        assert window == DateWindow(datetime(2026, 1, 1), datetime(2027, 1, 1))

    def test_last_month(self):
        window = resolve_window("lastmonth", NOW)
        assert window == DateWindow(datetime(2026, 3, 1), datetime(2026, 4, 1))

    def test_last_month_in_january(self):
        window = resolve_window("lastmonth", datetime(2026, 1, 20))
        assert window == DateWindow(datetime(2025, 12, 1), datetime(2026, 1, 1))

    def test_last_year(self):
        window = resolve_window("lastyear", NOW)
        assert window == DateWindow(datetime(2025, 1, 1), datetime(2026, 1, 1))

    @pytest.mark.parametrize("token", [p.value for p in Period])
    def test_start_before_end(self, token):
        window = resolve_window(token, NOW)
        assert window.start < window.end

    def test_unknown_token_resolves_like_month(self):
        assert resolve_window("bogus", NOW) == resolve_window("month", NOW)

    def test_day_window_at_midnight_is_empty(self):
        midnight = datetime(2026, 4, 15)
        window = resolve_window("day", midnight)

        assert window == DateWindow(midnight, midnight)
        assert midnight not in window

    def test_window_is_half_open(self):
        window = resolve_window("month", NOW)
        assert datetime(2026, 4, 1) in window
        assert datetime(2026, 5, 1) not in window


class TestResolveOpenWindow:
    """Tests for the order-status windows"""

    @pytest.mark.parametrize("token,start", [
        ("day", datetime(2026, 4, 15)),
        ("week", datetime(2026, 4, 13)),
        ("month", datetime(2026, 4, 1)),
        ("year", datetime(2026, 1, 1)),
    ])
    def test_windows_end_now(self, token, start):
        assert resolve_open_window(token, NOW) == DateWindow(start, NOW)

    def test_day_window_at_midnight_is_empty(self):
        midnight = datetime(2026, 4, 15)
        assert resolve_open_window("day", midnight) == DateWindow(midnight, midnight)

    @pytest.mark.parametrize("token", ["lastmonth", "lastyear", "bogus"])
    def test_unsupported_tokens_resolve_like_month(self, token):
        assert resolve_open_window(token, NOW) == resolve_open_window("month", NOW)


def test_start_of_week():
    assert start_of_week(date(2026, 4, 1)) == date(2026, 3, 30)
    assert start_of_week(date(2026, 4, 6)) == date(2026, 4, 6)


def test_shift_years_pins_leap_day():
    assert shift_years(datetime(2028, 2, 29, 9, 0), -1) == datetime(2027, 2, 28, 9, 0)
    assert shift_years(NOW, -1) == datetime(2025, 4, 15, 12, 0)
