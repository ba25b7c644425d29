"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities with validation
- interfaces.py: Repository and collaborator contracts
- time_arithmetic.py: Minute-of-day and local-date helpers
- slot_resolver.py: Availability-to-slot resolution
"""

from .entities import (
    Appointment,
    BookingCalendarEvent,
    BookingResult,
    CancellationResult,
    Seller,
    Slot,
    TimeInterval,
    User,
    WeeklyAvailabilityRule,
)
from .interfaces import (
    IAppointmentReader,
    IAppointmentRepository,
    IAppointmentWriter,
    IAvailabilityRepository,
    ICalendarPort,
    ISellerRepository,
    ITokenProvider,
    IUserRepository,
)
from .slot_resolver import resolve_slots

__all__ = [
    # Domain entities
    "User",
    "Seller",
    "WeeklyAvailabilityRule",
    "Appointment",
    "TimeInterval",
    "Slot",
    "BookingCalendarEvent",
    "BookingResult",
    "CancellationResult",
    # Repository interfaces
    "IUserRepository",
    "ISellerRepository",
    "IAvailabilityRepository",
    "IAppointmentRepository",
    # Segregated interfaces
    "IAppointmentReader",
    "IAppointmentWriter",
    # External collaborators
    "ICalendarPort",
    "ITokenProvider",
    # Slot engine
    "resolve_slots",
]
