# Repositories package: SQLAlchemy persistence mapped to domain entities

from .appointment_repo import AppointmentRepository
from .availability_repo import AvailabilityRepository
from .google_calendar_repo import GoogleCalendarRepository
from .seller_repo import SellerRepository
from .user_repo import UserRepository

__all__ = [
    "AppointmentRepository",
    "AvailabilityRepository",
    "GoogleCalendarRepository",
    "SellerRepository",
    "UserRepository",
]
