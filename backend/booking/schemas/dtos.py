"""
Data Transfer Objects (DTOs) and validation schemas.

Request DTOs are built from loosely-typed JSON bodies and checked with
validate() at the boundary; response DTOs are built from domain entities
with from_domain() and serialized with to_dict().
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from booking.core.config import load_booking_settings
from booking.core.exceptions import ValidationError
from booking.domain.entities import (
    Appointment,
    BookingResult,
    CancellationResult,
    Seller,
    User,
    WeeklyAvailabilityRule,
)
from booking.domain.time_arithmetic import format_12h, format_time, parse_date, parse_time

DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    if result <= 0:
        raise ValidationError(f"Valid {name} is required")
    return result


@dataclass
class BookingRequest:
    """DTO for booking requests: one slot start on one local date."""

    seller_id: int
    buyer_id: int
    date: str
    time_slot: str
    notes: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Optional[dict], buyer_id: int) -> "BookingRequest":
        payload = payload or {}
        missing = [k for k in ("sellerId", "date", "timeSlot") if not payload.get(k)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        return cls(
            seller_id=payload["sellerId"],
            buyer_id=buyer_id,
            date=payload["date"],
            time_slot=payload["timeSlot"],
            notes=payload.get("notes") or None,
        )

    def validate(self) -> None:
        """Validate the request data."""
        self.seller_id = _require_int(self.seller_id, "sellerId")
        self.buyer_id = _require_int(self.buyer_id, "buyerId")
        parse_date(self.date)
        parse_time(self.time_slot)
        if self.notes is not None and not isinstance(self.notes, str):
            raise ValidationError("notes must be a string")
        if self.notes is not None and len(self.notes) > 1000:
            raise ValidationError("Notes cannot exceed 1000 characters")

    @property
    def target_date(self) -> date:
        return parse_date(self.date)

    @property
    def start_minute(self) -> int:
        return parse_time(self.time_slot)


@dataclass
class CancelRequest:
    """DTO for cancellation requests."""

    appointment_id: int
    requesting_user_id: int

    def validate(self) -> None:
        self.appointment_id = _require_int(self.appointment_id, "appointmentId")
        self.requesting_user_id = _require_int(
            self.requesting_user_id, "requestingUserId"
        )


@dataclass
class TimeSlotRequest:
    start: str
    end: str


@dataclass
class DayScheduleRequest:
    day_of_week: int
    is_available: bool
    time_slots: List[TimeSlotRequest] = field(default_factory=list)


@dataclass
class WeeklyScheduleRequest:
    """DTO for a full weekly schedule replacement."""

    availability: List[DayScheduleRequest]
    timezone: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Optional[dict]) -> "WeeklyScheduleRequest":
        payload = payload or {}
        days = payload.get("availability")
        if not isinstance(days, list):
            raise ValidationError("Invalid availability data")

        parsed = []
        for day in days:
            if not isinstance(day, dict):
                raise ValidationError("Invalid availability data")
            slots = day.get("timeSlots") or []
            if not isinstance(slots, list):
                raise ValidationError("timeSlots must be a list")
            if not all(isinstance(s, dict) for s in slots):
                raise ValidationError("Invalid availability data")
            parsed.append(
                DayScheduleRequest(
                    day_of_week=day.get("dayOfWeek"),
                    is_available=bool(day.get("isAvailable")),
                    time_slots=[
                        TimeSlotRequest(start=s.get("start"), end=s.get("end"))
                        for s in slots
                    ],
                )
            )
        return cls(availability=parsed, timezone=payload.get("timezone") or None)

    def validate(self, claim_granularity: Optional[int] = None) -> None:
        """Check days and blocks; block starts must sit on the occupancy bucket grid."""
        if claim_granularity is None:
            claim_granularity = load_booking_settings().slot_claim_granularity_minutes
        seen = set()
        for day in self.availability:
            if not isinstance(day.day_of_week, int) or isinstance(day.day_of_week, bool):
                raise ValidationError("dayOfWeek must be an integer 0-6")
            if not 0 <= day.day_of_week <= 6:
                raise ValidationError("dayOfWeek must be between 0 (Sunday) and 6")
            if day.day_of_week in seen:
                raise ValidationError(f"Duplicate entry for day {day.day_of_week}")
            seen.add(day.day_of_week)
            if not day.is_available:
                continue
            for slot in day.time_slots:
                start, end = parse_time(slot.start), parse_time(slot.end)
                if start >= end:
                    raise ValidationError(
                        f"Time slot {slot.start}-{slot.end} must end after it starts"
                    )
                if start % claim_granularity:
                    raise ValidationError(
                        f"Time slot {slot.start}-{slot.end} must start on a "
                        f"multiple of {claim_granularity} minutes"
                    )

    def to_rules(self, seller_id: int) -> List[WeeklyAvailabilityRule]:
        """Enabled blocks per available day; a disabled placeholder otherwise."""
        rules = []
        for day in self.availability:
            if day.is_available and day.time_slots:
                for slot in day.time_slots:
                    rules.append(
                        WeeklyAvailabilityRule(
                            seller_id=seller_id,
                            day_of_week=day.day_of_week,
                            start_minute=parse_time(slot.start),
                            end_minute=parse_time(slot.end),
                            enabled=True,
                        )
                    )
            else:
                rules.append(
                    WeeklyAvailabilityRule(
                        seller_id=seller_id,
                        day_of_week=day.day_of_week,
                        start_minute=0,
                        end_minute=0,
                        enabled=False,
                    )
                )
        return rules


@dataclass
class TimeSlotResponse:
    start: str
    end: str
    label: str


@dataclass
class DayScheduleResponse:
    day_of_week: int
    day_name: str
    is_available: bool
    time_slots: List[TimeSlotResponse]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "isAvailable": self.is_available,
            "timeSlots": [asdict(s) for s in self.time_slots],
        }


def weekly_schedule_from_rules(
    rules: List[WeeklyAvailabilityRule],
) -> List[DayScheduleResponse]:
    """All seven days, each with its enabled blocks ordered by start."""
    days = []
    for day in range(7):
        blocks = sorted(
            (r for r in rules if r.day_of_week == day and r.enabled),
            key=lambda r: r.start_minute,
        )
        days.append(
            DayScheduleResponse(
                day_of_week=day,
                day_name=DAY_NAMES[day],
                is_available=bool(blocks),
                time_slots=[
                    TimeSlotResponse(
                        start=format_time(r.start_minute),
                        end=format_time(r.end_minute),
                        label=f"{format_12h(r.start_minute)} - {format_12h(r.end_minute)}",
                    )
                    for r in blocks
                ],
            )
        )
    return days


@dataclass
class SellerResponse:
    """DTO for seller API responses."""

    id: int
    user_id: int
    name: Optional[str]
    title: Optional[str]
    description: Optional[str]
    timezone: str
    availability: List[DayScheduleResponse]

    @classmethod
    def from_domain(
        cls,
        seller: Seller,
        user: Optional[User],
        rules: List[WeeklyAvailabilityRule],
    ) -> "SellerResponse":
        return cls(
            id=seller.id,
            user_id=seller.user_id,
            name=user.name if user else None,
            title=seller.title,
            description=seller.description,
            timezone=seller.timezone,
            availability=weekly_schedule_from_rules(rules),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "timezone": self.timezone,
            "availability": [d.to_dict() for d in self.availability],
        }


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses."""

    id: int
    seller_id: int
    buyer_id: int
    start_time: str
    end_time: str
    timezone: str
    status: str
    notes: Optional[str]
    meeting_link: Optional[str]
    role: Optional[str] = None

    @classmethod
    def from_domain(
        cls, appointment: Appointment, role: Optional[str] = None
    ) -> "AppointmentResponse":
        """Create response from domain entity."""
        return cls(
            id=appointment.id,
            seller_id=appointment.seller_id,
            buyer_id=appointment.buyer_id,
            start_time=appointment.start_instant.isoformat(),
            end_time=appointment.end_instant.isoformat(),
            timezone=appointment.timezone,
            status=appointment.status,
            notes=appointment.notes,
            meeting_link=appointment.meeting_link,
            role=role,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "sellerId": self.seller_id,
            "buyerId": self.buyer_id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "timezone": self.timezone,
            "status": self.status,
            "notes": self.notes,
            "meetingLink": self.meeting_link,
        }
        if self.role:
            data["role"] = self.role
        return data


@dataclass
class BookingResponse:
    appointment: AppointmentResponse
    calendar_event_created: bool
    buyer_invited: bool
    event_link: Optional[str]
    meet_link: Optional[str]

    @classmethod
    def from_result(cls, result: BookingResult) -> "BookingResponse":
        return cls(
            appointment=AppointmentResponse.from_domain(result.appointment),
            calendar_event_created=result.calendar_event_created,
            buyer_invited=result.buyer_invited,
            event_link=result.event_link,
            meet_link=result.meet_link,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appointment": self.appointment.to_dict(),
            "calendar": {
                "eventCreated": self.calendar_event_created,
                "buyerInvited": self.buyer_invited,
                "eventLink": self.event_link,
                "meetLink": self.meet_link,
            },
        }


@dataclass
class CancellationResponse:
    appointment: AppointmentResponse
    calendar_cancelled: bool
    calendar_results: List[str]

    @classmethod
    def from_result(cls, result: CancellationResult) -> "CancellationResponse":
        return cls(
            appointment=AppointmentResponse.from_domain(result.appointment),
            calendar_cancelled=result.calendar_cancelled,
            calendar_results=result.calendar_results,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appointment": self.appointment.to_dict(),
            "calendarCancelled": self.calendar_cancelled,
            "calendarResults": self.calendar_results,
        }


@dataclass
class ErrorResponse:
    """DTO for error responses."""

    error: str
    message: str
    success: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
