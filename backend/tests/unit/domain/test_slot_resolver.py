"""
Unit tests for availability-to-slot resolution.

Covers the Monday 09:00-17:00 walkthroughs, booked-interval exclusion,
past-slot filtering and the structural properties of every result.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from booking.core.exceptions import ValidationError
from booking.domain.entities import TimeInterval
from booking.domain.slot_resolver import generate_candidates, resolve_slots
from booking.domain.time_arithmetic import format_time, parse_time

UTC = ZoneInfo("UTC")
MONDAY = date(2024, 1, 15)
BEFORE_OPENING = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)
WORKDAY = TimeInterval(parse_time("09:00"), parse_time("17:00"))


def starts(slots):
    return [slot.start for slot in slots]


def every_half_hour(first: str, last: str):
    return [format_time(m) for m in range(parse_time(first), parse_time(last) + 1, 30)]


@pytest.mark.unit
@pytest.mark.domain
class TestGenerateCandidates:
    def test_last_candidate_ends_at_block_end(self):
        candidates = generate_candidates(WORKDAY, 60, 30)
        assert candidates[-1] == TimeInterval(960, 1020)

    def test_block_shorter_than_duration(self):
        assert generate_candidates(TimeInterval(540, 570), 60, 30) == []

    def test_exact_fit(self):
        assert generate_candidates(TimeInterval(540, 600), 60, 30) == [
            TimeInterval(540, 600)
        ]


@pytest.mark.unit
@pytest.mark.domain
class TestResolveSlots:
    def test_open_day_without_bookings(self):
        slots = resolve_slots([WORKDAY], [], 60, 30, BEFORE_OPENING, MONDAY, UTC)

        assert len(slots) == 15
        assert starts(slots) == every_half_hour("09:00", "16:00")
        assert slots[-1].end == "17:00"

    def test_booking_excludes_overlapping_candidates(self):
        booked = [TimeInterval(parse_time("10:00"), parse_time("11:00"))]

        slots = resolve_slots([WORKDAY], booked, 60, 30, BEFORE_OPENING, MONDAY, UTC)

        assert starts(slots) == ["09:00"] + every_half_hour("11:00", "16:00")

    def test_past_candidates_are_dropped(self):
        now = datetime(2024, 1, 15, 9, 45, tzinfo=timezone.utc)

        slots = resolve_slots([WORKDAY], [], 60, 30, now, MONDAY, UTC)

        assert starts(slots)[0] == "10:00"
        assert "09:00" not in starts(slots)
        assert "09:30" not in starts(slots)

    def test_past_filter_and_booking_combine(self):
        now = datetime(2024, 1, 15, 9, 45, tzinfo=timezone.utc)
        booked = [TimeInterval(parse_time("10:00"), parse_time("11:00"))]

        slots = resolve_slots([WORKDAY], booked, 60, 30, now, MONDAY, UTC)

        assert starts(slots)[0] == "11:00"

    def test_candidate_starting_exactly_now_is_kept(self):
        now = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        slots = resolve_slots([WORKDAY], [], 60, 30, now, MONDAY, UTC)
        assert starts(slots)[0] == "10:00"

    def test_adjacent_booking_does_not_overlap(self):
        booked = [TimeInterval(parse_time("08:00"), parse_time("09:00"))]
        slots = resolve_slots([WORKDAY], booked, 60, 30, BEFORE_OPENING, MONDAY, UTC)
        assert starts(slots)[0] == "09:00"

    def test_now_compared_in_seller_timezone(self):
        # 09:45 in New York is 14:45 UTC
        now = datetime(2024, 1, 15, 14, 45, tzinfo=timezone.utc)
        slots = resolve_slots(
            [WORKDAY], [], 60, 30, now, MONDAY, ZoneInfo("America/New_York")
        )
        assert starts(slots)[0] == "10:00"

    def test_booking_past_midnight_still_excludes(self):
        late_block = TimeInterval(parse_time("22:00"), parse_time("23:59"))
        booked = [TimeInterval(1410, 1470)]

        slots = resolve_slots([late_block], booked, 30, 15, BEFORE_OPENING, MONDAY, UTC)

        assert starts(slots) == ["22:00", "22:15", "22:30", "22:45", "23:00"]

    def test_multiple_blocks_keep_generation_order(self):
        morning = TimeInterval(parse_time("09:00"), parse_time("11:00"))
        afternoon = TimeInterval(parse_time("14:00"), parse_time("15:00"))

        slots = resolve_slots(
            [morning, afternoon], [], 60, 30, BEFORE_OPENING, MONDAY, UTC
        )

        assert starts(slots) == ["09:00", "09:30", "10:00", "14:00"]

    def test_no_blocks_means_no_slots(self):
        assert resolve_slots([], [], 60, 30, BEFORE_OPENING, MONDAY, UTC) == []

    def test_whole_day_in_the_past(self):
        now = datetime(2024, 1, 16, 0, 0, tzinfo=timezone.utc)
        assert resolve_slots([WORKDAY], [], 60, 30, now, MONDAY, UTC) == []

    @pytest.mark.parametrize("duration,interval", [(0, 30), (-60, 30), (60, 0)])
    def test_rejects_non_positive_duration_or_interval(self, duration, interval):
        with pytest.raises(ValidationError):
            resolve_slots([WORKDAY], [], duration, interval, BEFORE_OPENING, MONDAY, UTC)


@pytest.mark.unit
@pytest.mark.domain
class TestResolveSlotsProperties:
    BLOCKS = [
        TimeInterval(parse_time("08:15"), parse_time("12:00")),
        TimeInterval(parse_time("13:00"), parse_time("18:45")),
    ]
    BOOKED = [
        TimeInterval(parse_time("09:00"), parse_time("10:00")),
        TimeInterval(parse_time("13:30"), parse_time("14:30")),
        TimeInterval(parse_time("17:45"), parse_time("18:15")),
    ]

    @pytest.mark.parametrize("duration,interval", [(60, 30), (45, 15), (30, 60)])
    def test_slots_fit_blocks_avoid_bookings_and_sit_on_grid(self, duration, interval):
        slots = resolve_slots(
            self.BLOCKS, self.BOOKED, duration, interval, BEFORE_OPENING, MONDAY, UTC
        )

        assert slots
        for slot in slots:
            assert slot.end_minute - slot.start_minute == duration
            containing = [
                b
                for b in self.BLOCKS
                if b.start_minute <= slot.start_minute
                and slot.end_minute <= b.end_minute
            ]
            assert len(containing) == 1
            assert (slot.start_minute - containing[0].start_minute) % interval == 0
            assert not any(
                TimeInterval(slot.start_minute, slot.end_minute).overlaps(b)
                for b in self.BOOKED
            )
