"""
Health controller - liveness endpoint for monitoring.
"""

import logging

from flask import Blueprint
from sqlalchemy import text

from booking.core.api_utils import api_response
from booking.db.session import SessionLocal

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Liveness plus a database round trip.

    Status codes:
        200: service and database reachable
        503: database unreachable
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return api_response(True, "healthy", {"database": "ok"})
    except Exception as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"error": str(e)}},
        )
        return api_response(False, "unhealthy", {"database": "error"}, 503)
    finally:
        db.close()
