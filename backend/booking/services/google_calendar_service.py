"""
Google Calendar Service
Single Responsibility: Turn booking calendar requests into Google Calendar calls
"""

import logging
from typing import Optional

from booking.core.exceptions import CalendarError, ExpiredAccessTokenError
from booking.domain.entities import (
    Appointment,
    BookingCalendarEvent,
    CalendarAttendee,
    CalendarEventResult,
    Seller,
    User,
)
from booking.domain.interfaces import (
    ICalendarPort,
    IGoogleCalendarRepository,
    ITokenProvider,
)
from booking.domain.time_arithmetic import to_utc
from booking.repositories.google_calendar_repo import GoogleCalendarRepository

logger = logging.getLogger(__name__)


def build_booking_event(
    appointment: Appointment,
    seller: Seller,
    seller_user: User,
    buyer: User,
) -> BookingCalendarEvent:
    """
    The single calendar event of a booking: created in the seller's
    calendar with both parties invited, so the buyer needs no event of
    their own.
    """
    title = seller.title or "Consultation"
    lines = [
        "Appointment Details:",
        f"• Service: {title}",
        f"• Provider: {seller_user.name or 'Unknown'}",
        f"• Client: {buyer.name or 'Unknown'}",
        f"• Duration: {appointment.duration_minutes} minutes",
    ]
    if appointment.notes:
        lines.append(f"• Notes: {appointment.notes}")
    lines.extend(
        [
            "",
            f"Booking ID: {appointment.id}",
            "",
            "This appointment was booked through the booking system.",
        ]
    )

    return BookingCalendarEvent(
        title=f"{title} - Appointment",
        description="\n".join(lines),
        start_instant=appointment.start_instant,
        end_instant=appointment.end_instant,
        timezone=appointment.timezone,
        organizer_user_id=seller.user_id,
        attendees=[
            CalendarAttendee(email=seller_user.email, display_name=seller_user.name),
            CalendarAttendee(email=buyer.email, display_name=buyer.name),
        ],
        location=title,
        request_id=f"booking-{appointment.id}",
    )


class GoogleCalendarService(ICalendarPort):
    """
    Calendar port backed by the Google Calendar API.
    Depends on abstract interfaces for the REST calls and the tokens.
    """

    def __init__(
        self,
        token_provider: ITokenProvider,
        calendar_repo: Optional[IGoogleCalendarRepository] = None,
    ):
        self.calendar_repo = calendar_repo or GoogleCalendarRepository()
        self.token_provider = token_provider

    def create_event(self, event: BookingCalendarEvent) -> CalendarEventResult:
        """
        Create the booking event in the organizer's primary calendar.

        Raises:
            CalendarError: no usable token, or the API call failed
        """
        payload = self._to_google_event(event)
        created = self._call_with_refresh(
            event.organizer_user_id,
            lambda token: self.calendar_repo.create_event(token, payload),
        )

        event_id = created.get("id")
        if not event_id:
            raise CalendarError("Calendar API response did not include an event id")

        logger.info(
            "Calendar event created",
            extra={
                "context": {
                    "organizer_user_id": event.organizer_user_id,
                    "event_id": event_id,
                }
            },
        )
        return CalendarEventResult(
            event_id=event_id,
            event_link=created.get("htmlLink"),
            meet_link=self._extract_meet_link(created),
        )

    def delete_event(self, owner_user_id: int, event_id: str) -> None:
        """
        Delete an event from the owner's primary calendar.

        Raises:
            CalendarError: no usable token, or the API call failed
        """
        self._call_with_refresh(
            owner_user_id,
            lambda token: self.calendar_repo.delete_event(token, event_id),
        )
        logger.info(
            "Calendar event deleted",
            extra={"context": {"owner_user_id": owner_user_id, "event_id": event_id}},
        )

    def _call_with_refresh(self, user_id: int, call):
        """Run `call(token)`; a rejected token triggers one forced refresh and retry."""
        access_token = self.token_provider.get_valid_access_token(user_id)
        if not access_token:
            raise CalendarError(f"No calendar access for user {user_id}")

        try:
            return call(access_token)
        except ExpiredAccessTokenError:
            logger.info(f"Access token expired for user {user_id}, attempting refresh")

        new_token = self.token_provider.get_valid_access_token(
            user_id, force_refresh=True
        )
        if not new_token:
            raise CalendarError(f"Failed to refresh token for user {user_id}")

        try:
            return call(new_token)
        except ExpiredAccessTokenError as e:
            raise CalendarError(
                f"Calendar rejected refreshed token for user {user_id}"
            ) from e

    def _to_google_event(self, event: BookingCalendarEvent) -> dict:
        """
        Format event data for Google Calendar API.
        """
        body = {
            "summary": event.title,
            "description": event.description,
            "start": {
                "dateTime": to_utc(event.start_instant).isoformat(),
                "timeZone": event.timezone,
            },
            "end": {
                "dateTime": to_utc(event.end_instant).isoformat(),
                "timeZone": event.timezone,
            },
            "attendees": [
                {"email": a.email, "displayName": a.display_name}
                for a in event.attendees
                if a.email
            ],
        }
        if event.location:
            body["location"] = event.location
        if event.request_id:
            body["conferenceData"] = {
                "createRequest": {
                    "requestId": event.request_id,
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            }
        return body

    def _extract_meet_link(self, created: dict) -> Optional[str]:
        if created.get("hangoutLink"):
            return created["hangoutLink"]
        for entry in created.get("conferenceData", {}).get("entryPoints", []):
            if entry.get("entryPointType") == "video":
                return entry.get("uri")
        return None
