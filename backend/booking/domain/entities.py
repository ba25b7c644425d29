"""
Domain entities - Pure business logic, no framework dependencies.

These dataclasses are what repositories return and services consume;
ORM models never leave the repository layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking.core.exceptions import ValidationError
from booking.domain.time_arithmetic import MINUTES_PER_DAY, format_time

USER_ROLES = ("buyer", "seller", "both", "notdefined")

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
APPOINTMENT_STATUSES = (
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
)


@dataclass
class User:
    """A platform user; the same account can act as buyer and seller."""

    id: Optional[int] = None
    email: str = ""
    name: str = ""
    role: str = "notdefined"
    calendar_integrated: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.email or "@" not in self.email:
            raise ValidationError("Valid email is required")
        if self.role not in USER_ROLES:
            raise ValidationError(f"Invalid role '{self.role}'")


@dataclass
class Seller:
    """Seller profile: the owner of weekly availability and appointments."""

    id: Optional[int] = None
    user_id: int = 0
    title: Optional[str] = None
    description: Optional[str] = None
    timezone: str = "UTC"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.user_id <= 0:
            raise ValidationError("Valid user_id is required")
        validate_timezone(self.timezone)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class WeeklyAvailabilityRule:
    """One contiguous open block on a weekday, in seller-local minutes.

    Disabled rules are placeholders for an unavailable day and carry no
    interval constraint.
    """

    seller_id: int
    day_of_week: int
    start_minute: int
    end_minute: int
    enabled: bool = True
    id: Optional[int] = None

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 (Sunday) and 6")
        for value in (self.start_minute, self.end_minute):
            if not 0 <= value < MINUTES_PER_DAY:
                raise ValidationError("Times must be between 00:00 and 23:59")
        if self.enabled and self.start_minute >= self.end_minute:
            raise ValidationError(
                f"Availability block {format_time(self.start_minute)}-"
                f"{format_time(self.end_minute)} must end after it starts"
            )

    @property
    def start_time(self) -> str:
        return format_time(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_time(self.end_minute)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open [start_minute, end_minute) interval in local minutes."""

    start_minute: int
    end_minute: int

    def overlaps(self, other: "TimeInterval") -> bool:
        return intervals_overlap(
            self.start_minute, self.end_minute, other.start_minute, other.end_minute
        )


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """[a_start, a_end) and [b_start, b_end) overlap iff a_start < b_end and b_start < a_end."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class Slot:
    """A bookable interval on a specific date; never persisted."""

    start_minute: int
    end_minute: int

    @property
    def start(self) -> str:
        return format_time(self.start_minute)

    @property
    def end(self) -> str:
        return format_time(self.end_minute)

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass
class Appointment:
    """Domain entity for a booked appointment (instants are UTC)."""

    seller_id: int
    buyer_id: int
    start_instant: datetime
    end_instant: datetime
    timezone: str = "UTC"
    status: str = STATUS_CONFIRMED
    id: Optional[int] = None
    notes: Optional[str] = None
    seller_event_ref: Optional[str] = None
    buyer_event_ref: Optional[str] = None
    meeting_link: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.seller_id <= 0:
            raise ValidationError("Valid seller_id is required")
        if self.buyer_id <= 0:
            raise ValidationError("Valid buyer_id is required")
        if self.end_instant <= self.start_instant:
            raise ValidationError("Appointment must end after it starts")
        if self.status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"Invalid status '{self.status}'")

    @property
    def duration_minutes(self) -> int:
        return int((self.end_instant - self.start_instant).total_seconds() // 60)

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED


@dataclass
class CalendarAttendee:
    email: str
    display_name: Optional[str] = None


@dataclass
class BookingCalendarEvent:
    """
    The single calendar event of a booking.
    Created in the seller's calendar with both parties as attendees.
    """

    title: str
    description: str
    start_instant: datetime
    end_instant: datetime
    timezone: str
    organizer_user_id: int
    attendees: List[CalendarAttendee] = field(default_factory=list)
    location: Optional[str] = None
    request_id: Optional[str] = None

    def __post_init__(self):
        if not self.title.strip():
            raise ValidationError("Event title cannot be empty")
        if self.end_instant <= self.start_instant:
            raise ValidationError("End time must be after start time")


@dataclass
class CalendarEventResult:
    event_id: str
    event_link: Optional[str] = None
    meet_link: Optional[str] = None


@dataclass
class BookingResult:
    """Outcome of requestBooking: the appointment plus advisory calendar info."""

    appointment: Appointment
    calendar_event_created: bool = False
    event_link: Optional[str] = None
    meet_link: Optional[str] = None

    @property
    def buyer_invited(self) -> bool:
        return self.calendar_event_created


@dataclass
class CancellationResult:
    """Outcome of cancelBooking: which calendar sides were cleaned up."""

    appointment: Appointment
    seller_event_deleted: bool = False
    buyer_event_deleted: bool = False

    @property
    def calendar_cancelled(self) -> bool:
        return self.seller_event_deleted or self.buyer_event_deleted

    @property
    def calendar_results(self) -> List[str]:
        sides = []
        if self.seller_event_deleted:
            sides.append("seller")
        if self.buyer_event_deleted:
            sides.append("buyer")
        return sides


def validate_timezone(name: str) -> str:
    """Reject names missing from the IANA timezone database."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise ValidationError(f"Unknown timezone '{name}'") from e
    return name


def default_weekly_rules(seller_id: int) -> List[WeeklyAvailabilityRule]:
    """Monday-Friday 09:00-17:00; Saturday and Sunday disabled."""
    rules = []
    for day in range(7):
        available = 1 <= day <= 5
        rules.append(
            WeeklyAvailabilityRule(
                seller_id=seller_id,
                day_of_week=day,
                start_minute=9 * 60,
                end_minute=17 * 60,
                enabled=available,
            )
        )
    return rules
