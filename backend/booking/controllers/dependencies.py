"""
Wiring of repositories and services for one request-scoped DB session.
"""

from booking.core.config import load_booking_settings
from booking.repositories.appointment_repo import AppointmentRepository
from booking.repositories.availability_repo import AvailabilityRepository
from booking.repositories.google_calendar_repo import GoogleCalendarRepository
from booking.repositories.seller_repo import SellerRepository
from booking.repositories.user_repo import UserRepository
from booking.services.availability_service import AvailabilityService
from booking.services.booking_service import BookingCoordinator
from booking.services.google_calendar_service import GoogleCalendarService
from booking.services.oauth_token_service import OAuthTokenService


def build_availability_service(db) -> AvailabilityService:
    settings = load_booking_settings()
    return AvailabilityService(
        seller_repo=SellerRepository(db),
        availability_repo=AvailabilityRepository(
            db, claim_granularity_minutes=settings.slot_claim_granularity_minutes
        ),
        user_repo=UserRepository(db),
    )


def build_booking_coordinator(db) -> BookingCoordinator:
    settings = load_booking_settings()
    granularity = settings.slot_claim_granularity_minutes
    return BookingCoordinator(
        seller_repo=SellerRepository(db),
        availability_repo=AvailabilityRepository(
            db, claim_granularity_minutes=granularity
        ),
        appointment_repo=AppointmentRepository(
            db, claim_granularity_minutes=granularity
        ),
        user_repo=UserRepository(db),
        calendar_port=GoogleCalendarService(
            token_provider=OAuthTokenService(
                db, timeout=settings.calendar_api_timeout_seconds
            ),
            calendar_repo=GoogleCalendarRepository(
                timeout=settings.calendar_api_timeout_seconds
            ),
        ),
        settings=settings,
    )
