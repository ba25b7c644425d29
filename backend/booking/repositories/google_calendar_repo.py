"""
Google Calendar Repository
Single Responsibility: Handle Google Calendar REST API calls
"""

import logging
from typing import Optional

import requests

from booking.core.config import get_calendar_api_timeout_seconds
from booking.core.exceptions import CalendarError, ExpiredAccessTokenError
from booking.domain.interfaces import IGoogleCalendarRepository

logger = logging.getLogger(__name__)


class GoogleCalendarRepository(IGoogleCalendarRepository):
    """
    Repository for Google Calendar API operations.
    Every call is bounded by the configured calendar timeout.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.base_url = "https://www.googleapis.com/calendar/v3"
        self.timeout = timeout or get_calendar_api_timeout_seconds()

    def _headers(self, access_token: str) -> dict:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def create_event(self, access_token: str, event_data: dict) -> dict:
        """
        Create an event in the primary calendar.

        Args:
            access_token: OAuth access token
            event_data: Google Calendar event resource

        Returns:
            The created event resource

        Raises:
            ExpiredAccessTokenError: the token was rejected (401)
            CalendarError: any other failure
        """
        try:
            response = requests.post(
                f"{self.base_url}/calendars/primary/events",
                headers=self._headers(access_token),
                params={"conferenceDataVersion": 1, "sendUpdates": "all"},
                json=event_data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request error creating calendar event: {str(e)}")
            raise CalendarError(f"Calendar request failed: {e}") from e

        if response.status_code in (200, 201):
            return response.json()
        if response.status_code == 401:
            logger.warning(
                "Google Calendar API: Unauthorized access token during event creation"
            )
            raise ExpiredAccessTokenError("Access token expired, needs refresh")

        logger.error(
            f"Error creating calendar event: {response.status_code} - {response.text}"
        )
        raise CalendarError(f"Calendar API returned {response.status_code}")

    def delete_event(self, access_token: str, event_id: str) -> None:
        """
        Delete an event from the primary calendar.
        An event that is already gone (404/410) counts as deleted.
        """
        try:
            response = requests.delete(
                f"{self.base_url}/calendars/primary/events/{event_id}",
                headers=self._headers(access_token),
                params={"sendUpdates": "all"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request error deleting calendar event: {str(e)}")
            raise CalendarError(f"Calendar request failed: {e}") from e

        if response.status_code in (200, 204, 404, 410):
            return
        if response.status_code == 401:
            logger.warning(
                "Google Calendar API: Unauthorized access token during event deletion"
            )
            raise ExpiredAccessTokenError("Access token expired, needs refresh")

        logger.error(
            f"Error deleting calendar event: {response.status_code} - {response.text}"
        )
        raise CalendarError(f"Calendar API returned {response.status_code}")
