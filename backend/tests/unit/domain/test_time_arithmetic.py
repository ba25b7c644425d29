"""
Unit tests for minute-of-day arithmetic and timezone helpers.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from booking.core.exceptions import FormatError, ValidationError
from booking.domain.time_arithmetic import (
    add_minutes,
    combine_local,
    day_of_week,
    format_12h,
    format_time,
    local_day_bounds,
    local_interval_on,
    minute_of_day_on,
    parse_date,
    parse_time,
    to_utc,
)

NEW_YORK = ZoneInfo("America/New_York")


@pytest.mark.unit
@pytest.mark.domain
class TestParseAndFormatTime:
    @pytest.mark.parametrize(
        "value,expected",
        [("00:00", 0), ("09:00", 540), ("9:30", 570), ("16:00", 960), ("23:59", 1439)],
    )
    def test_parse_time_valid(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", ["0900", "24:00", "12:60", "ab:cd", "", "9:5"])
    def test_parse_time_rejects_malformed(self, value):
        with pytest.raises(FormatError):
            parse_time(value)

    def test_parse_time_rejects_non_string(self):
        with pytest.raises(FormatError):
            parse_time(540)

    def test_format_error_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_time("nope")

    def test_format_time_zero_pads(self):
        assert format_time(0) == "00:00"
        assert format_time(545) == "09:05"
        assert format_time(1439) == "23:59"

    def test_parse_format_inverse(self):
        for minutes in range(0, 1440, 7):
            assert parse_time(format_time(minutes)) == minutes

    def test_add_minutes_has_no_wraparound(self):
        assert add_minutes(960, 60) == 1020
        assert add_minutes(1410, 60) == 1470

    def test_format_12h(self):
        assert format_12h(0) == "12:00 AM"
        assert format_12h(540) == "9:00 AM"
        assert format_12h(720) == "12:00 PM"
        assert format_12h(1020) == "5:00 PM"


@pytest.mark.unit
@pytest.mark.domain
class TestDates:
    def test_parse_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    @pytest.mark.parametrize("value", ["2024/01/15", "15-01-2024", "2024-02-30", ""])
    def test_parse_date_rejects_malformed(self, value):
        with pytest.raises(FormatError):
            parse_date(value)

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week(date(2024, 1, 14)) == 0  # Sunday
        assert day_of_week(date(2024, 1, 15)) == 1  # Monday
        assert day_of_week(date(2024, 1, 20)) == 6  # Saturday


@pytest.mark.unit
@pytest.mark.domain
class TestTimezoneHelpers:
    def test_combine_local_attaches_zone(self):
        instant = combine_local(date(2024, 1, 15), 570, NEW_YORK)
        assert to_utc(instant) == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_local_day_bounds_new_york(self):
        lo, hi = local_day_bounds(date(2024, 1, 15), NEW_YORK)
        assert lo == datetime(2024, 1, 15, 5, 0, tzinfo=timezone.utc)
        assert hi == datetime(2024, 1, 16, 5, 0, tzinfo=timezone.utc)

    def test_local_day_bounds_on_dst_change_is_23_hours(self):
        lo, hi = local_day_bounds(date(2024, 3, 10), NEW_YORK)
        assert (hi - lo).total_seconds() == 23 * 3600

    def test_minute_of_day_on_past_midnight(self):
        day = date(2024, 1, 15)
        start = datetime(2024, 1, 16, 4, 30, tzinfo=timezone.utc)  # 23:30 local
        end = datetime(2024, 1, 16, 5, 30, tzinfo=timezone.utc)  # 00:30 next day
        assert minute_of_day_on(start, day, NEW_YORK) == 1410
        assert minute_of_day_on(end, day, NEW_YORK) == 1470

    def test_local_interval_plain_day(self):
        day = date(2024, 1, 15)
        start = datetime(2024, 1, 15, 15, 0, tzinfo=timezone.utc)
        end = datetime(2024, 1, 15, 16, 0, tzinfo=timezone.utc)
        assert local_interval_on(start, end, day, NEW_YORK) == (600, 660)

    def test_local_interval_keeps_length_on_fall_back(self):
        # 01:00 EDT to 01:00 EST
        day = date(2024, 11, 3)
        start = datetime(2024, 11, 3, 5, 0, tzinfo=timezone.utc)
        end = datetime(2024, 11, 3, 6, 0, tzinfo=timezone.utc)
        assert minute_of_day_on(end, day, NEW_YORK) == 60
        assert local_interval_on(start, end, day, NEW_YORK) == (60, 120)

    def test_local_interval_covers_wall_clock_on_spring_forward(self):
        # 01:30 EST to 03:30 EDT
        day = date(2024, 3, 10)
        start = datetime(2024, 3, 10, 6, 30, tzinfo=timezone.utc)
        end = datetime(2024, 3, 10, 7, 30, tzinfo=timezone.utc)
        assert local_interval_on(start, end, day, NEW_YORK) == (90, 210)

    def test_to_utc_treats_naive_as_utc(self):
        naive = datetime(2024, 1, 15, 9, 0)
        assert to_utc(naive) == datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
