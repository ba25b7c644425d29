"""
Availability-to-slot resolution.

A pure function of its inputs: weekly blocks for the target weekday, the
intervals already occupied on the target date, the fixed duration, the
candidate step and the current instant. No storage access happens here.
"""

from datetime import date, datetime
from typing import Iterable, List
from zoneinfo import ZoneInfo

from booking.core.exceptions import ValidationError
from booking.domain.entities import Slot, TimeInterval, intervals_overlap
from booking.domain.time_arithmetic import add_minutes, combine_local, to_utc


def generate_candidates(
    block: TimeInterval, duration: int, slot_interval: int
) -> List[TimeInterval]:
    """Candidate starts every `slot_interval` minutes that fit fully inside the block."""
    candidates = []
    start = block.start_minute
    while add_minutes(start, duration) <= block.end_minute:
        candidates.append(TimeInterval(start, add_minutes(start, duration)))
        start = add_minutes(start, slot_interval)
    return candidates


def resolve_slots(
    availability_blocks: Iterable[TimeInterval],
    booked_intervals: Iterable[TimeInterval],
    duration: int,
    slot_interval: int,
    now: datetime,
    target_date: date,
    tz: ZoneInfo,
) -> List[Slot]:
    """
    Compute the bookable slots of one seller for one local calendar date.

    Args:
        availability_blocks: Enabled blocks for the weekday of `target_date`
        booked_intervals: Occupied intervals on `target_date`, in local minutes
            (values past 1440 are allowed for bookings running past midnight)
        duration: Appointment length in minutes
        slot_interval: Step between candidate starts in minutes
        now: Current instant; candidates starting before it are dropped
        target_date: Local calendar date the minutes refer to
        tz: Seller timezone used to turn local minutes into instants

    Returns:
        Slots in generation order (ascending within each block)

    Raises:
        ValidationError: duration or slot_interval is not positive
    """
    if duration <= 0:
        raise ValidationError("Appointment duration must be positive")
    if slot_interval <= 0:
        raise ValidationError("Slot interval must be positive")

    booked = list(booked_intervals)
    now_utc = to_utc(now)
    slots = []

    for block in availability_blocks:
        for candidate in generate_candidates(block, duration, slot_interval):
            if any(
                intervals_overlap(
                    candidate.start_minute,
                    candidate.end_minute,
                    b.start_minute,
                    b.end_minute,
                )
                for b in booked
            ):
                continue

            starts_at = combine_local(target_date, candidate.start_minute, tz)
            if to_utc(starts_at) < now_utc:
                continue

            slots.append(Slot(candidate.start_minute, candidate.end_minute))

    return slots
