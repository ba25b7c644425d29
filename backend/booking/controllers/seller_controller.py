"""
Seller controller: public seller directory and slot lookup.

Handles HTTP concerns only; use-cases live in the services.
"""

from flask import Blueprint, request

from booking.core.api_utils import api_response
from booking.core.exceptions import NotFoundError, ValidationError
from booking.core.limiter_config import limiter
from booking.db.session import SessionLocal
from booking.domain.time_arithmetic import parse_date
from booking.repositories.seller_repo import SellerRepository
from booking.controllers.dependencies import (
    build_availability_service,
    build_booking_coordinator,
)

sellers_bp = Blueprint("sellers", __name__, url_prefix="/api/sellers")


@sellers_bp.route("", methods=["GET"])
@limiter.limit("100 per minute")
def list_sellers():
    """List active sellers with their weekly availability."""
    db = SessionLocal()
    try:
        service = build_availability_service(db)
        sellers = service.list_sellers()
        return api_response(
            True,
            f"Found {len(sellers)} sellers",
            [s.to_dict() for s in sellers],
        )
    finally:
        db.close()


@sellers_bp.route("/<int:seller_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_seller(seller_id: int):
    db = SessionLocal()
    try:
        service = build_availability_service(db)
        seller = service.get_weekly_schedule(seller_id)
        return api_response(True, "Seller retrieved", seller.to_dict())
    finally:
        db.close()


@sellers_bp.route("/<int:seller_id>/availability", methods=["GET"])
@limiter.limit("60 per minute")
def get_seller_availability(seller_id: int):
    """
    Bookable slots for one date.

    Query params:
        date: YYYY-MM-DD, interpreted in the seller's timezone

    Returns:
        {"date", "timezone", "slots": [{"start": "HH:MM", "end": "HH:MM"}]}
    """
    raw_date = request.args.get("date")
    if not raw_date:
        raise ValidationError("Date is required")
    target_date = parse_date(raw_date)

    db = SessionLocal()
    try:
        seller = SellerRepository(db).get_by_id(seller_id)
        if seller is None:
            raise NotFoundError(f"Seller {seller_id} not found")
        slots = build_booking_coordinator(db).get_available_slots(seller_id, target_date)
        message = (
            f"Found {len(slots)} available slots"
            if slots
            else "No availability for this day"
        )
        return api_response(
            True,
            message,
            {
                "date": target_date.isoformat(),
                "timezone": seller.timezone,
                "slots": [slot.to_dict() for slot in slots],
            },
        )
    finally:
        db.close()
