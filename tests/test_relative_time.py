"""Tests for injury_dates.relative_time — parsing, arithmetic, formatting."""

from datetime import datetime, timedelta

import pytest

from injury_dates.errors import ParseError
from injury_dates.relative_time import (
    absolute_datetime,
    elapsed_breakdown,
    format_dicom_date,
    format_dicom_time,
    format_elapsed,
    parse_base_date,
    parse_table_datetime,
    relative_instant,
    whole_seconds,
)

INJURY = datetime(2010, 4, 14, 21, 40, 0)
BASELINE = datetime(2000, 1, 1)


# ---------------------------------------------------------------------------
# parse_table_datetime
# ---------------------------------------------------------------------------

class TestParseTableDatetime:
    def test_full_format(self):
        assert parse_table_datetime("4/14/2010 21:40:00") == INJURY

    def test_zero_padded(self):
        assert parse_table_datetime("04/04/2010 09:05:07") == datetime(2010, 4, 4, 9, 5, 7)

    def test_seconds_optional(self):
        assert parse_table_datetime("4/14/2010 21:40") == INJURY

    def test_surrounding_whitespace(self):
        assert parse_table_datetime("  4/14/2010 21:40:00 ") == INJURY

    @pytest.mark.parametrize("text", [
        "",
        "2010-04-14 21:40:00",
        "4/14/10 21:40:00",
        "4/14/2010",
        "13/14/2010 21:40:00",
        "2/30/2010 10:00:00",
        "4/14/2010 25:00:00",
        "4/14/2010 21:60:00",
    ])
    def test_invalid(self, text):
        with pytest.raises(ParseError):
            parse_table_datetime(text)


# ---------------------------------------------------------------------------
# parse_base_date
# ---------------------------------------------------------------------------

class TestParseBaseDate:
    def test_slash_format(self):
        assert parse_base_date("1/1/2000") == BASELINE

    def test_dicom_format(self):
        assert parse_base_date("20000101") == BASELINE

    @pytest.mark.parametrize("text", ["", "2000-01-01", "1/32/2000", "20001301", "abc"])
    def test_invalid(self, text):
        with pytest.raises(ParseError):
            parse_base_date(text)


# ---------------------------------------------------------------------------
# absolute_datetime
# ---------------------------------------------------------------------------

class TestAbsoluteDatetime:
    def test_six_digit_time(self):
        assert absolute_datetime("20100415", "013000") == datetime(2010, 4, 15, 1, 30, 0)

    def test_four_digit_time(self):
        assert absolute_datetime("20100415", "0130") == datetime(2010, 4, 15, 1, 30, 0)

    def test_fractional_seconds_ignored(self):
        assert absolute_datetime("20100415", "013015.123456") == datetime(2010, 4, 15, 1, 30, 15)

    def test_padding_stripped(self):
        assert absolute_datetime(" 20100415 ", "013000 ") == datetime(2010, 4, 15, 1, 30, 0)

    @pytest.mark.parametrize("date, time", [
        ("2010041", "013000"),     # short date
        ("20100415", "013"),       # short time
        ("20100415", "01300"),     # 5 digits
        ("20100415", "0130001"),   # 7 digits
        ("20100415", "01300.5"),   # 5 digits before fraction
        ("", "013000"),
        ("20100415", ""),
        ("2010AB15", "013000"),
        ("20101315", "013000"),    # month 13
        ("20100415", "250000"),    # hour 25
        ("20100415", "016000"),    # minute 60
    ])
    def test_invalid(self, date, time):
        with pytest.raises(ParseError):
            absolute_datetime(date, time)


# ---------------------------------------------------------------------------
# relative_instant
# ---------------------------------------------------------------------------

class TestRelativeInstant:
    def test_same_as_injury_is_baseline(self):
        assert relative_instant(INJURY, INJURY, BASELINE) == BASELINE

    def test_offset_replayed_from_baseline(self):
        observed = datetime(2010, 4, 15, 1, 30, 0)
        assert relative_instant(observed, INJURY, BASELINE) == datetime(2000, 1, 1, 3, 50, 0)

    def test_before_injury(self):
        observed = INJURY - timedelta(days=2, hours=1)
        assert relative_instant(observed, INJURY, BASELINE) == datetime(1999, 12, 29, 23, 0, 0)

    def test_spacing_preserved(self):
        x = datetime(2010, 5, 1, 8, 15, 30)
        y = datetime(2010, 3, 2, 23, 59, 59)
        rx = relative_instant(x, INJURY, BASELINE)
        ry = relative_instant(y, INJURY, BASELINE)
        assert rx - ry == x - y


# ---------------------------------------------------------------------------
# elapsed_breakdown
# ---------------------------------------------------------------------------

class TestElapsedBreakdown:
    def test_days_hours_minutes(self):
        observed = datetime(2010, 4, 16, 5, 10, 0)
        assert elapsed_breakdown(observed, INJURY) == (1, 7, 30)

    def test_zero(self):
        assert elapsed_breakdown(INJURY, INJURY) == (0, 0, 0)

    def test_seconds_dropped(self):
        observed = INJURY + timedelta(minutes=5, seconds=59)
        assert elapsed_breakdown(observed, INJURY) == (0, 0, 5)

    def test_negative_truncates_toward_zero(self):
        observed = INJURY - timedelta(minutes=90)
        assert elapsed_breakdown(observed, INJURY) == (0, -1, -30)

    def test_negative_more_than_a_day(self):
        observed = INJURY - timedelta(days=1, hours=2, minutes=3)
        assert elapsed_breakdown(observed, INJURY) == (-1, -2, -3)

    def test_whole_seconds_truncates_fraction(self):
        assert whole_seconds(timedelta(seconds=1, microseconds=900000)) == 1
        assert whole_seconds(timedelta(seconds=-1, microseconds=-900000)) == -1


# ---------------------------------------------------------------------------
# formatting
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_dicom_date(self):
        assert format_dicom_date(INJURY) == "20100414"

    def test_dicom_date_pads_year(self):
        assert format_dicom_date(datetime(999, 1, 2)) == "09990102"

    def test_dicom_time(self):
        assert format_dicom_time(datetime(2010, 4, 14, 1, 2, 3)) == "010203"

    def test_midnight(self):
        assert format_dicom_time(BASELINE) == "000000"

    def test_elapsed(self):
        assert format_elapsed(1, 7, 30) == "1 days; 7 hours; 30 minutes"
