"""
Endpoints acting on the authenticated user's own seller profile.
"""

from flask import Blueprint, request

from booking.controllers.dependencies import build_availability_service
from booking.core.api_utils import api_response
from booking.core.auth_decorators import get_current_user_id, jwt_required
from booking.core.exceptions import NotFoundError
from booking.core.limiter_config import limiter
from booking.db.session import SessionLocal
from booking.schemas.dtos import WeeklyScheduleRequest

me_bp = Blueprint("me", __name__, url_prefix="/api/me")


@me_bp.route("/seller/availability", methods=["GET"])
@limiter.limit("60 per minute")
@jwt_required
def get_my_availability():
    """Weekly schedule and timezone of the caller's seller profile."""
    db = SessionLocal()
    try:
        service = build_availability_service(db)
        schedule = service.get_schedule_for_user(get_current_user_id())
        if schedule is None:
            raise NotFoundError("Seller profile not found")
        return api_response(True, "Availability retrieved", schedule.to_dict())
    finally:
        db.close()


@me_bp.route("/seller/availability", methods=["POST"])
@limiter.limit("20 per minute")
@jwt_required
def save_my_availability():
    """
    Replace the caller's weekly schedule.

    Body:
        {"timezone": "America/New_York",
         "availability": [{"dayOfWeek": 1, "isAvailable": true,
                           "timeSlots": [{"start": "09:00", "end": "17:00"}]}]}
    """
    schedule_request = WeeklyScheduleRequest.from_json(request.get_json(silent=True))

    db = SessionLocal()
    try:
        service = build_availability_service(db)
        schedule = service.replace_weekly_schedule(
            get_current_user_id(), schedule_request
        )
        return api_response(True, "Availability saved successfully", schedule.to_dict())
    finally:
        db.close()
