"""Tests for time values, their arithmetic and formatting."""

from splits.times import (
    INVALID,
    add_times,
    format_time,
    format_time_of_day,
    is_invalid_time,
    is_valid_time,
    parse_time,
    subtract_times,
)


class TestTimeArithmetic:
    def test_add_valid_times(self):
        assert add_times(120, 45) == 165

    def test_subtract_valid_times(self):
        assert subtract_times(300, 120) == 180

    def test_absent_propagates(self):
        assert add_times(None, 45) is None
        assert add_times(45, None) is None
        assert subtract_times(None, 45) is None

    def test_invalid_propagates(self):
        assert add_times(INVALID, 45) is INVALID
        assert subtract_times(45, INVALID) is INVALID

    def test_absent_wins_over_invalid(self):
        assert add_times(None, INVALID) is None
        assert subtract_times(INVALID, None) is None

    def test_validity(self):
        assert is_valid_time(0)
        assert is_valid_time(12.5)
        assert not is_valid_time(None)
        assert not is_valid_time(INVALID)
        assert is_invalid_time(INVALID)
        assert not is_invalid_time(None)

    def test_invalid_never_equals_a_number(self):
        assert INVALID != 0
        assert repr(INVALID) == "INVALID"


class TestFormatTime:
    def test_minutes_and_seconds(self):
        assert format_time(125) == "02:05"

    def test_hours(self):
        assert format_time(3 * 3600 + 7 * 60 + 9) == "3:07:09"

    def test_negative(self):
        assert format_time(-65) == "-01:05"

    def test_absent(self):
        assert format_time(None) == "-----"

    def test_invalid(self):
        assert format_time(INVALID) == "???"

    def test_fractional_with_precision(self):
        assert format_time(65.25, precision=1) == "01:05.2"

    def test_fractional_without_precision(self):
        assert format_time(65.5) == "01:05.5"

    def test_time_of_day(self):
        assert format_time_of_day(10 * 3600 + 3 * 60 + 4) == "10:03:04"

    def test_time_of_day_wraps_past_midnight(self):
        assert format_time_of_day(25 * 3600) == "01:00:00"


class TestParseTime:
    def test_minutes_and_seconds(self):
        assert parse_time("02:05") == 125

    def test_hours(self):
        assert parse_time("1:02:05") == 3725

    def test_fraction(self):
        assert parse_time("02:05.5") == 125.5

    def test_comma_fraction(self):
        assert parse_time("02:05,5") == 125.5

    def test_whole_seconds_are_ints(self):
        assert isinstance(parse_time("02:05"), int)

    def test_surrounding_whitespace(self):
        assert parse_time("  02:05 ") == 125

    def test_unrecognised_text(self):
        assert parse_time("mp") is None
        assert parse_time("") is None
        assert parse_time("-----") is None
