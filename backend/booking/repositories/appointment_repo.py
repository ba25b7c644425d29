"""
Appointment repository implementation.

Occupancy is enforced by the database: every confirmed appointment owns one
row in appointment_slot_claims per claim bucket its interval touches, and
(seller_id, claim_start) is unique. Overlapping intervals always share a
bucket, so a second overlapping insert fails at commit time.
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError

from booking.core.config import load_booking_settings
from booking.core.exceptions import (
    AlreadyCancelledError,
    NotFoundError,
    SlotUnavailableError,
)
from booking.db.base import Appointment as DbAppointment
from booking.db.base import AppointmentSlotClaim as DbClaim
from booking.db.base import Seller as DbSeller
from booking.domain.entities import STATUS_CANCELLED, STATUS_CONFIRMED
from booking.domain.entities import Appointment as DomainAppointment
from booking.domain.interfaces import IAppointmentRepository
from booking.domain.time_arithmetic import local_day_bounds, to_utc

logger = logging.getLogger(__name__)


def claim_buckets(start: datetime, end: datetime, granularity: int) -> List[int]:
    """Epoch-minute starts of every `granularity` bucket touched by [start, end)."""
    start_minute = int(to_utc(start).timestamp() // 60)
    end_minute = -int(-to_utc(end).timestamp() // 60)
    bucket = start_minute - start_minute % granularity
    buckets = []
    while bucket < end_minute:
        buckets.append(bucket)
        bucket += granularity
    return buckets


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations."""

    def __init__(self, db_session, claim_granularity_minutes: Optional[int] = None):
        self.db = db_session
        self.claim_granularity_minutes = (
            claim_granularity_minutes
            or load_booking_settings().slot_claim_granularity_minutes
        )

    # ---- writes ----

    def create_confirmed(self, appointment: DomainAppointment) -> DomainAppointment:
        """Insert a confirmed appointment together with its occupancy claims.

        Raises:
            SlotUnavailableError: another confirmed appointment of the seller
                overlaps the interval
        """
        db_appointment = DbAppointment()
        db_appointment.seller_id = appointment.seller_id
        db_appointment.buyer_id = appointment.buyer_id
        db_appointment.start_time = to_utc(appointment.start_instant)
        db_appointment.end_time = to_utc(appointment.end_instant)
        db_appointment.timezone = appointment.timezone
        db_appointment.status = STATUS_CONFIRMED
        db_appointment.notes = appointment.notes
        db_appointment.claims = [
            DbClaim(seller_id=appointment.seller_id, claim_start=bucket)
            for bucket in claim_buckets(
                appointment.start_instant,
                appointment.end_instant,
                self.claim_granularity_minutes,
            )
        ]

        try:
            self.db.add(db_appointment)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(
                "Booking rejected by occupancy constraint",
                extra={
                    "context": {
                        "seller_id": appointment.seller_id,
                        "start_time": to_utc(appointment.start_instant).isoformat(),
                    }
                },
            )
            raise SlotUnavailableError(
                "This time slot was just booked. Please choose another slot."
            ) from e

        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def cancel(self, appointment_id: int) -> DomainAppointment:
        """Flip the appointment to cancelled and release its claims in one commit."""
        db_appointment = self._get_db(appointment_id)
        if db_appointment.status == STATUS_CANCELLED:
            raise AlreadyCancelledError(
                f"Appointment {appointment_id} is already cancelled"
            )

        try:
            db_appointment.claims.clear()
            db_appointment.status = STATUS_CANCELLED
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def update_calendar_refs(
        self,
        appointment_id: int,
        seller_event_ref: Optional[str] = None,
        buyer_event_ref: Optional[str] = None,
        meeting_link: Optional[str] = None,
    ) -> DomainAppointment:
        db_appointment = self._get_db(appointment_id)
        if seller_event_ref is not None:
            db_appointment.seller_event_id = seller_event_ref
        if buyer_event_ref is not None:
            db_appointment.buyer_event_id = buyer_event_ref
        if meeting_link is not None:
            db_appointment.meeting_link = meeting_link
        self.db.commit()
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    # ---- reads ----

    def get_by_id(self, appointment_id: int) -> Optional[DomainAppointment]:
        db_appointment = self.db.query(DbAppointment).filter_by(id=appointment_id).first()
        return self._to_domain(db_appointment) if db_appointment else None

    def get_confirmed_for_seller_on_date(
        self, seller_id: int, day: date
    ) -> List[DomainAppointment]:
        """Confirmed appointments starting on `day` in the seller's timezone.

        The day boundaries are the seller's local midnights converted to UTC,
        never the UTC calendar day.
        """
        db_seller = self.db.query(DbSeller).filter_by(id=seller_id).first()
        if db_seller is None:
            raise NotFoundError(f"Seller {seller_id} not found")

        lo, hi = local_day_bounds(day, ZoneInfo(db_seller.timezone or "UTC"))
        return self.get_confirmed_in_range(seller_id, lo, hi)

    def get_confirmed_in_range(
        self, seller_id: int, start: datetime, end: datetime
    ) -> List[DomainAppointment]:
        rows = (
            self.db.query(DbAppointment)
            .filter(
                DbAppointment.seller_id == seller_id,
                DbAppointment.status == STATUS_CONFIRMED,
                DbAppointment.start_time >= to_utc(start),
                DbAppointment.start_time < to_utc(end),
            )
            .order_by(DbAppointment.start_time)
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_for_buyer(self, buyer_id: int) -> List[DomainAppointment]:
        rows = (
            self.db.query(DbAppointment)
            .filter_by(buyer_id=buyer_id)
            .order_by(DbAppointment.start_time.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_for_seller(self, seller_id: int) -> List[DomainAppointment]:
        rows = (
            self.db.query(DbAppointment)
            .filter_by(seller_id=seller_id)
            .order_by(DbAppointment.start_time.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def _get_db(self, appointment_id: int) -> DbAppointment:
        db_appointment = self.db.query(DbAppointment).filter_by(id=appointment_id).first()
        if db_appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return db_appointment

    def _to_domain(self, row: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity (instants re-tagged as UTC)."""
        return DomainAppointment(
            id=row.id,
            seller_id=row.seller_id,
            buyer_id=row.buyer_id,
            start_instant=to_utc(row.start_time),
            end_instant=to_utc(row.end_time),
            timezone=row.timezone,
            status=row.status,
            notes=row.notes,
            seller_event_ref=row.seller_event_id,
            buyer_event_ref=row.buyer_event_id,
            meeting_link=row.meeting_link,
            created_at=to_utc(row.created_at) if row.created_at else None,
            updated_at=to_utc(row.updated_at) if row.updated_at else None,
        )
