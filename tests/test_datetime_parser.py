"""Tests for src.core.datetime_parser — date and time fragment parsing."""

import pytest
from datetime import date, time

from src.core.datetime_parser import parse_date, parse_time
from src.core.errors import InvalidFormatError, InvalidValueError

TODAY = date(2025, 6, 10)


# ---------------------------------------------------------------------------
# parse_date
# ---------------------------------------------------------------------------


class TestParseDate:
    def test_full_date(self):
        assert parse_date("15-03-2025", today=TODAY) == date(2025, 3, 15)

    def test_day_and_month_default_year(self):
        assert parse_date("15-03", today=TODAY) == date(2025, 3, 15)

    def test_day_only_defaults_month_and_year(self):
        assert parse_date("15", today=TODAY) == date(2025, 6, 15)

    def test_all_separators(self):
        assert parse_date("1.2.2026", today=TODAY) == date(2026, 2, 1)
        assert parse_date("1,2,2026", today=TODAY) == date(2026, 2, 1)
        assert parse_date("1 2 2026", today=TODAY) == date(2026, 2, 1)
        assert parse_date("1-2.2026", today=TODAY) == date(2026, 2, 1)

    def test_repeated_separators_ignored(self):
        assert parse_date("1 -- 2 ,, 2026", today=TODAY) == date(2026, 2, 1)

    def test_surrounding_whitespace(self):
        assert parse_date("  15-03  ", today=TODAY) == date(2025, 3, 15)

    def test_defaults_to_current_date(self):
        today = date.today()
        assert parse_date("1") == date(today.year, today.month, 1)

    def test_too_many_fields(self):
        with pytest.raises(InvalidFormatError):
            parse_date("1-2-2025-4", today=TODAY)

    def test_no_fields(self):
        with pytest.raises(InvalidFormatError):
            parse_date(" - . ", today=TODAY)

    def test_non_numeric(self):
        with pytest.raises(InvalidFormatError):
            parse_date("tomorrow", today=TODAY)

    def test_day_out_of_range(self):
        with pytest.raises(InvalidValueError):
            parse_date("32-01-2025", today=TODAY)
        with pytest.raises(InvalidValueError):
            parse_date("0-01-2025", today=TODAY)

    def test_month_out_of_range(self):
        with pytest.raises(InvalidValueError):
            parse_date("10-13-2025", today=TODAY)
        with pytest.raises(InvalidValueError):
            parse_date("10-0", today=TODAY)

    def test_not_a_calendar_date(self):
        with pytest.raises(InvalidValueError):
            parse_date("31-02-2025", today=TODAY)

    def test_year_zero(self):
        with pytest.raises(InvalidValueError):
            parse_date("1-1-0", today=TODAY)

    def test_error_message_is_user_facing(self):
        with pytest.raises(InvalidFormatError, match="dd-mm-yyyy"):
            parse_date("1-2-3-4", today=TODAY)


# ---------------------------------------------------------------------------
# parse_time
# ---------------------------------------------------------------------------


class TestParseTime:
    def test_three_digits(self):
        assert parse_time("930") == time(9, 30)

    def test_four_digits(self):
        assert parse_time("0930") == time(9, 30)
        assert parse_time("2359") == time(23, 59)

    def test_colon(self):
        assert parse_time("9:30") == time(9, 30)
        assert parse_time("14:30") == time(14, 30)

    def test_other_separators(self):
        assert parse_time("14.30") == time(14, 30)
        assert parse_time("14-30") == time(14, 30)

    def test_extra_fields_ignored(self):
        assert parse_time("14:30:15") == time(14, 30)

    def test_midnight(self):
        assert parse_time("00:00") == time(0, 0)

    def test_hours_out_of_range(self):
        with pytest.raises(InvalidValueError):
            parse_time("25:00")

    def test_minutes_out_of_range(self):
        with pytest.raises(InvalidValueError):
            parse_time("12:60")
        with pytest.raises(InvalidValueError):
            parse_time("975")

    def test_wrong_length(self):
        with pytest.raises(InvalidFormatError):
            parse_time("12345")
        with pytest.raises(InvalidFormatError):
            parse_time("12")

    def test_separator_with_single_field(self):
        with pytest.raises(InvalidFormatError):
            parse_time("9:")

    def test_non_numeric(self):
        with pytest.raises(InvalidFormatError):
            parse_time("noon")
        with pytest.raises(InvalidFormatError):
            parse_time("ab:cd")
