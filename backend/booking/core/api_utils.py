"""
Common API utilities for consistent response formatting across all controllers.
"""

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from booking.core.exceptions import BookingError
from booking.schemas.dtos import ErrorResponse

logger = logging.getLogger(__name__)


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def error_response(error: str, message: str, status_code: int) -> tuple:
    """Error envelope: {"success": false, "error": <code>, "message": ...}."""
    return jsonify(ErrorResponse(error=error, message=message).to_dict()), status_code


def register_error_handlers(app: Flask) -> None:
    """Render the booking error taxonomy as JSON error envelopes."""

    @app.errorhandler(BookingError)
    def handle_booking_error(exc: BookingError):
        logger.info(
            "Request rejected",
            extra={
                "context": {
                    "path": request.path,
                    "error": exc.error,
                    "detail": exc.message,
                }
            },
        )
        return error_response(exc.error, exc.message, exc.status_code)

    @app.errorhandler(404)
    def handle_not_found(exc):
        return error_response("not_found", "Resource not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return error_response("method_not_allowed", "Method not allowed", 405)

    @app.errorhandler(429)
    def handle_rate_limited(exc):
        return error_response("rate_limited", "Too many requests", 429)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return error_response(
                exc.name.lower().replace(" ", "_"), exc.description, exc.code
            )
        logger.error(
            "Unhandled error",
            extra={"context": {"path": request.path, "error": str(exc)}},
            exc_info=True,
        )
        return error_response("server_error", "Internal server error", 500)
