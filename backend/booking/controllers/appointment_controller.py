"""
Appointment controller: booking, listing and cancellation.
"""

from flask import Blueprint, request

from booking.controllers.dependencies import build_booking_coordinator
from booking.core.api_utils import api_response
from booking.core.auth_decorators import get_current_user_id, jwt_required
from booking.core.limiter_config import limiter
from booking.db.session import SessionLocal
from booking.schemas.dtos import (
    BookingRequest,
    BookingResponse,
    CancellationResponse,
    CancelRequest,
)

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.route("", methods=["POST"])
@limiter.limit("10 per minute")
@jwt_required
def create_appointment():
    """
    Book a slot for the authenticated buyer.

    Body:
        {"sellerId": 1, "date": "2024-01-15", "timeSlot": "09:30", "notes": "..."}

    Status codes:
        201: booked (calendar flags are advisory)
        400: malformed body
        404: unknown seller
        409: slot no longer available
    """
    booking_request = BookingRequest.from_json(
        request.get_json(silent=True), buyer_id=get_current_user_id()
    )

    db = SessionLocal()
    try:
        coordinator = build_booking_coordinator(db)
        result = coordinator.request_booking(booking_request)
        return api_response(
            True,
            "Appointment booked successfully",
            BookingResponse.from_result(result).to_dict(),
            201,
        )
    finally:
        db.close()


@appointments_bp.route("", methods=["GET"])
@limiter.limit("60 per minute")
@jwt_required
def list_appointments():
    """Appointments of the caller as buyer and as seller, newest first."""
    db = SessionLocal()
    try:
        coordinator = build_booking_coordinator(db)
        appointments = coordinator.list_appointments_for_user(get_current_user_id())
        return api_response(
            True,
            f"Found {len(appointments)} appointments",
            [a.to_dict() for a in appointments],
        )
    finally:
        db.close()


@appointments_bp.route("/<int:appointment_id>/cancel", methods=["POST"])
@limiter.limit("20 per minute")
@jwt_required
def cancel_appointment(appointment_id: int):
    db = SessionLocal()
    try:
        coordinator = build_booking_coordinator(db)
        result = coordinator.cancel_booking(
            CancelRequest(
                appointment_id=appointment_id,
                requesting_user_id=get_current_user_id(),
            )
        )
        return api_response(
            True,
            "Appointment cancelled successfully",
            CancellationResponse.from_result(result).to_dict(),
        )
    finally:
        db.close()
