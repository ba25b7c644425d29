"""
Abstract interfaces for repositories and external collaborators.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from .entities import (
    Appointment,
    BookingCalendarEvent,
    CalendarEventResult,
    Seller,
    User,
    WeeklyAvailabilityRule,
)


class IUserRepository(ABC):
    """Interface for user lookups."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    def create(self, user: User) -> User:
        """Create a new user."""
        pass


class ISellerRepository(ABC):
    """Interface for seller profile operations."""

    @abstractmethod
    def get_by_id(self, seller_id: int) -> Optional[Seller]:
        """Get seller profile by ID."""
        pass

    @abstractmethod
    def get_by_user_id(self, user_id: int) -> Optional[Seller]:
        """Get the seller profile owned by a user."""
        pass

    @abstractmethod
    def list_active(self) -> List[Seller]:
        """Get all active seller profiles."""
        pass

    @abstractmethod
    def create_profile(self, seller: Seller) -> Seller:
        """Create a seller profile."""
        pass

    @abstractmethod
    def update_timezone(self, seller_id: int, timezone: str) -> Seller:
        """Change the seller's timezone."""
        pass


class IAvailabilityRepository(ABC):
    """Interface for weekly availability rules."""

    @abstractmethod
    def replace_weekly_rules(
        self, seller_id: int, rules: List[WeeklyAvailabilityRule]
    ) -> List[WeeklyAvailabilityRule]:
        """Delete all rules of the seller and insert `rules` as one unit."""
        pass

    @abstractmethod
    def get_rules_for_day(
        self, seller_id: int, day_of_week: int
    ) -> List[WeeklyAvailabilityRule]:
        """Enabled rules of the seller for a weekday (0 = Sunday)."""
        pass

    @abstractmethod
    def get_all_rules(self, seller_id: int) -> List[WeeklyAvailabilityRule]:
        """All rules of the seller, including disabled placeholders."""
        pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def get_confirmed_for_seller_on_date(
        self, seller_id: int, day: date
    ) -> List[Appointment]:
        """Confirmed appointments starting on `day` in the seller's local calendar."""
        pass

    @abstractmethod
    def get_confirmed_in_range(
        self, seller_id: int, start: datetime, end: datetime
    ) -> List[Appointment]:
        """Confirmed appointments with start_instant in [start, end)."""
        pass

    @abstractmethod
    def list_for_buyer(self, buyer_id: int) -> List[Appointment]:
        """All appointments booked by a buyer."""
        pass

    @abstractmethod
    def list_for_seller(self, seller_id: int) -> List[Appointment]:
        """All appointments of a seller."""
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def create_confirmed(self, appointment: Appointment) -> Appointment:
        """Insert as confirmed; raises SlotUnavailableError on an overlapping booking."""
        pass

    @abstractmethod
    def cancel(self, appointment_id: int) -> Appointment:
        """Flip to cancelled and release the occupied interval."""
        pass

    @abstractmethod
    def update_calendar_refs(
        self,
        appointment_id: int,
        seller_event_ref: Optional[str] = None,
        buyer_event_ref: Optional[str] = None,
        meeting_link: Optional[str] = None,
    ) -> Appointment:
        """Store external calendar references on the appointment."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class ICalendarPort(ABC):
    """
    Interface for the external calendar collaborator.
    Every call is best-effort: failures raise CalendarError and callers
    decide whether to continue.
    """

    @abstractmethod
    def create_event(self, event: BookingCalendarEvent) -> CalendarEventResult:
        """Create the booking event in the organizer's calendar."""
        pass

    @abstractmethod
    def delete_event(self, owner_user_id: int, event_id: str) -> None:
        """Delete an event from the calendar of `owner_user_id`."""
        pass


class ITokenProvider(ABC):
    """Provides usable calendar access tokens, refreshing them when needed."""

    @abstractmethod
    def get_valid_access_token(
        self, user_id: int, force_refresh: bool = False
    ) -> Optional[str]:
        """Return an access token for the user, or None if none is available."""
        pass


class IGoogleCalendarRepository(ABC):
    """
    Interface for Google Calendar API operations.
    Focused on external API access.
    """

    @abstractmethod
    def create_event(self, access_token: str, event_data: dict) -> dict:
        """Insert an event into the primary calendar and return the API payload."""
        pass

    @abstractmethod
    def delete_event(self, access_token: str, event_id: str) -> None:
        """Delete an event from the primary calendar."""
        pass
