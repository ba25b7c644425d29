"""
Authentication helpers for the booking API.

Callers identify themselves with a JWT bearer token whose subject is the
user id. Login flows live outside this service; this module only validates
the token and exposes the acting user to the controllers.

Example:
    @appointments_bp.route("", methods=["POST"])
    @jwt_required
    def create_appointment():
        buyer_id = get_current_user_id()
"""

from functools import wraps
from typing import Optional

from flask import g, request

from booking.core.api_utils import error_response
from booking.core.security import get_user_id_from_token


def get_current_user_id() -> Optional[int]:
    """Return the id of the authenticated user for this request."""
    return getattr(g, "current_user_id", None)


def jwt_required(f):
    """Decorator to require JWT authentication for API endpoints.

    Extracts JWT from Authorization header and sets g.current_user_id.
    If no valid JWT, returns 401.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return error_response(
                "unauthorized", "Missing or invalid Authorization header", 401
            )

        token = auth_header.split(" ", 1)[1].strip()
        user_id = get_user_id_from_token(token)
        if user_id is None:
            return error_response("unauthorized", "Invalid or expired token", 401)

        g.current_user_id = user_id
        return f(*args, **kwargs)

    return decorated_function
