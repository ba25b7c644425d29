# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import (
    availability_service,
    booking_service,
    google_calendar_service,
    oauth_token_service,
)

__all__ = [
    "availability_service",
    "booking_service",
    "google_calendar_service",
    "oauth_token_service",
]
