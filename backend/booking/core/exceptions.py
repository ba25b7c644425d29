"""
Custom exceptions for the booking application.
Centralized error taxonomy shared by the domain, services and controllers.
"""


class BookingError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code = 400
    error = "booking_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.error


class ValidationError(BookingError):
    """Malformed input, rejected without retry."""

    status_code = 400
    error = "validation_error"


class FormatError(ValidationError):
    """A time or date string did not match the expected format."""


class NotFoundError(BookingError):
    """The requested seller or appointment does not exist."""

    status_code = 404
    error = "not_found"


class ForbiddenError(BookingError):
    """The acting user is not allowed to perform this operation."""

    status_code = 403
    error = "forbidden"


class SlotUnavailableError(BookingError):
    """The chosen slot is stale or already taken; pick another slot."""

    status_code = 409
    error = "slot_unavailable"


class AlreadyCancelledError(BookingError):
    """The appointment was already cancelled; nothing changed."""

    status_code = 409
    error = "already_cancelled"


class ExpiredAccessTokenError(Exception):
    """
    Exception raised when Google Calendar API access token has expired.
    Used to trigger a token refresh.
    """

    pass


class CalendarError(Exception):
    """Raised by calendar adapters when the provider call fails."""

    pass
