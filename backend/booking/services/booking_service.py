"""
Booking coordinator: slot queries, booking and cancellation.

The appointment store is the source of truth. Calendar sync is advisory:
its failures are logged and folded into boolean flags on the result.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from booking.core.config import BookingSettings, load_booking_settings
from booking.core.exceptions import (
    AlreadyCancelledError,
    ForbiddenError,
    NotFoundError,
    SlotUnavailableError,
)
from booking.domain.entities import (
    Appointment,
    BookingResult,
    CancellationResult,
    Seller,
    Slot,
    TimeInterval,
)
from booking.domain.interfaces import (
    IAppointmentRepository,
    IAvailabilityRepository,
    ICalendarPort,
    ISellerRepository,
    IUserRepository,
)
from booking.domain.slot_resolver import resolve_slots
from booking.domain.time_arithmetic import (
    combine_local,
    day_of_week,
    format_time,
    local_interval_on,
    to_utc,
    utc_now,
)
from booking.schemas.dtos import AppointmentResponse, BookingRequest, CancelRequest
from booking.services.google_calendar_service import build_booking_event

logger = logging.getLogger(__name__)


class BookingCoordinator:
    """Application service for booking use-cases.

    Depends on interfaces only; the calendar port is optional and a missing
    port simply means no calendar events are created.
    """

    def __init__(
        self,
        seller_repo: ISellerRepository,
        availability_repo: IAvailabilityRepository,
        appointment_repo: IAppointmentRepository,
        user_repo: IUserRepository,
        calendar_port: Optional[ICalendarPort] = None,
        settings: Optional[BookingSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.seller_repo = seller_repo
        self.availability_repo = availability_repo
        self.appointment_repo = appointment_repo
        self.user_repo = user_repo
        self.calendar_port = calendar_port
        self.settings = settings or load_booking_settings()
        self.clock = clock

    # ---- slot queries ----

    def get_available_slots(
        self, seller_id: int, target_date: date, now: Optional[datetime] = None
    ) -> List[Slot]:
        """Bookable slots of the seller on a date of the seller's local calendar."""
        seller = self._require_seller(seller_id)
        return self._resolve(seller, target_date, now or self.clock())

    def _resolve(self, seller: Seller, target_date: date, now: datetime) -> List[Slot]:
        tz = seller.tz
        rules = self.availability_repo.get_rules_for_day(
            seller.id, day_of_week(target_date)
        )
        if not rules:
            return []

        blocks = [TimeInterval(r.start_minute, r.end_minute) for r in rules]
        booked = [
            TimeInterval(
                *local_interval_on(a.start_instant, a.end_instant, target_date, tz)
            )
            for a in self.appointment_repo.get_confirmed_for_seller_on_date(
                seller.id, target_date
            )
        ]
        return resolve_slots(
            blocks,
            booked,
            self.settings.appointment_duration_minutes,
            self.settings.slot_interval_minutes,
            now,
            target_date,
            tz,
        )

    # ---- booking ----

    def request_booking(self, request: BookingRequest) -> BookingResult:
        """Book one slot for the buyer.

        Business Rules:
        - The slot must be in the freshly resolved slot set for that date
        - The appointment is stored confirmed; overlapping inserts are
          rejected by the store
        - Calendar failures never fail the booking
        """
        request.validate()
        seller = self._require_seller(request.seller_id)
        buyer = self.user_repo.get_by_id(request.buyer_id)
        if not buyer:
            raise NotFoundError("Buyer not found")

        target_date = request.target_date
        start_minute = request.start_minute
        available = self._resolve(seller, target_date, self.clock())
        if not any(slot.start_minute == start_minute for slot in available):
            logger.info(
                "Requested slot not available",
                extra={
                    "context": {
                        "seller_id": seller.id,
                        "date": request.date,
                        "time_slot": format_time(start_minute),
                    }
                },
            )
            raise SlotUnavailableError(
                "The selected time slot is no longer available. Please choose another slot."
            )

        start_instant = to_utc(combine_local(target_date, start_minute, seller.tz))
        end_instant = start_instant + timedelta(
            minutes=self.settings.appointment_duration_minutes
        )
        appointment = self.appointment_repo.create_confirmed(
            Appointment(
                seller_id=seller.id,
                buyer_id=buyer.id,
                start_instant=start_instant,
                end_instant=end_instant,
                timezone=seller.timezone,
                notes=request.notes,
            )
        )
        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": appointment.id,
                    "seller_id": seller.id,
                    "buyer_id": buyer.id,
                    "start_time": start_instant.isoformat(),
                }
            },
        )

        return self._sync_calendar_on_booking(appointment, seller, buyer)

    def _sync_calendar_on_booking(self, appointment, seller, buyer) -> BookingResult:
        if self.calendar_port is None:
            return BookingResult(appointment=appointment)

        try:
            seller_user = self.user_repo.get_by_id(seller.user_id)
            if seller_user is None:
                raise NotFoundError("Seller user not found")
            event = build_booking_event(appointment, seller, seller_user, buyer)
            created = self.calendar_port.create_event(event)
        except Exception as e:
            logger.warning(
                "Calendar event not created",
                extra={
                    "context": {
                        "appointment_id": appointment.id,
                        "seller_id": seller.id,
                        "error": str(e),
                    }
                },
            )
            return BookingResult(appointment=appointment)

        try:
            appointment = self.appointment_repo.update_calendar_refs(
                appointment.id,
                seller_event_ref=created.event_id,
                meeting_link=created.meet_link,
            )
        except Exception as e:
            logger.error(
                "Failed to store calendar references",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
            )

        return BookingResult(
            appointment=appointment,
            calendar_event_created=True,
            event_link=created.event_link,
            meet_link=created.meet_link,
        )

    # ---- cancellation ----

    def cancel_booking(self, request: CancelRequest) -> CancellationResult:
        """Cancel an appointment on behalf of its buyer or its seller.

        Raises:
            NotFoundError: unknown appointment
            ForbiddenError: requester is neither the buyer nor the seller
            AlreadyCancelledError: nothing to do
        """
        request.validate()
        appointment = self.appointment_repo.get_by_id(request.appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {request.appointment_id} not found")

        seller = self.seller_repo.get_by_id(appointment.seller_id)
        seller_user_id = seller.user_id if seller else None
        if request.requesting_user_id not in (appointment.buyer_id, seller_user_id):
            raise ForbiddenError("Unauthorized to cancel this appointment")

        if appointment.is_cancelled:
            raise AlreadyCancelledError("Appointment is already cancelled")

        cancelled = self.appointment_repo.cancel(appointment.id)
        logger.info(
            "Appointment cancelled",
            extra={
                "context": {
                    "appointment_id": appointment.id,
                    "cancelled_by": request.requesting_user_id,
                }
            },
        )

        seller_deleted = False
        if appointment.seller_event_ref and seller_user_id:
            seller_deleted = self._delete_calendar_event(
                seller_user_id, appointment.seller_event_ref, appointment.id, "seller"
            )
        buyer_deleted = False
        if appointment.buyer_event_ref:
            buyer_deleted = self._delete_calendar_event(
                appointment.buyer_id, appointment.buyer_event_ref, appointment.id, "buyer"
            )

        return CancellationResult(
            appointment=cancelled,
            seller_event_deleted=seller_deleted,
            buyer_event_deleted=buyer_deleted,
        )

    def _delete_calendar_event(
        self, owner_user_id: int, event_id: str, appointment_id: int, side: str
    ) -> bool:
        """Best-effort delete of one side's event; never raises."""
        if self.calendar_port is None:
            return False
        try:
            self.calendar_port.delete_event(owner_user_id, event_id)
            return True
        except Exception as e:
            logger.warning(
                f"{side.capitalize()} calendar event not cancelled",
                extra={
                    "context": {
                        "appointment_id": appointment_id,
                        "event_id": event_id,
                        "error": str(e),
                    }
                },
            )
            return False

    # ---- listings ----

    def list_appointments_for_user(self, user_id: int) -> List[AppointmentResponse]:
        """Appointments of the user as buyer and as seller, newest first."""
        responses = {
            a.id: AppointmentResponse.from_domain(a, role="buyer")
            for a in self.appointment_repo.list_for_buyer(user_id)
        }
        seller = self.seller_repo.get_by_user_id(user_id)
        if seller is not None:
            for a in self.appointment_repo.list_for_seller(seller.id):
                responses[a.id] = AppointmentResponse.from_domain(a, role="seller")

        return sorted(responses.values(), key=lambda r: r.start_time, reverse=True)

    def _require_seller(self, seller_id: int) -> Seller:
        seller = self.seller_repo.get_by_id(seller_id)
        if seller is None:
            raise NotFoundError(f"Seller {seller_id} not found")
        return seller
