"""
OAuth Token Service
Single Responsibility: Keep calendar access tokens usable for each user
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from booking.core.config import (
    get_calendar_api_timeout_seconds,
    get_google_client_credentials,
)
from booking.db.base import UserToken
from booking.domain.interfaces import ITokenProvider
from booking.domain.time_arithmetic import to_utc

logger = logging.getLogger(__name__)

PROVIDER_GOOGLE = "google"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
REFRESH_MARGIN = timedelta(minutes=5)


class OAuthTokenService(ITokenProvider):
    """
    Token provider backed by the user_tokens table.
    Failures are logged and reported as None; callers treat a missing token
    as "calendar unavailable".
    """

    def __init__(self, db_session, timeout: Optional[float] = None):
        self.db = db_session
        self.timeout = timeout or get_calendar_api_timeout_seconds()

    def store_token(
        self,
        user_id: int,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
        scope: Optional[str] = None,
        provider: str = PROVIDER_GOOGLE,
    ) -> UserToken:
        """Insert or update the credentials of a user for a provider."""
        record = self._get_record(user_id, provider)
        if record is None:
            record = UserToken(user_id=user_id, provider=provider)
            self.db.add(record)

        record.access_token = access_token
        if refresh_token:
            record.refresh_token = refresh_token
        if scope:
            record.scope = scope
        record.expires_at = (
            datetime.now(timezone.utc) + timedelta(seconds=expires_in)
            if expires_in
            else None
        )

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "Failed to store OAuth token",
                extra={"context": {"user_id": user_id, "provider": provider}},
                exc_info=True,
            )
            raise
        return record

    def get_valid_access_token(
        self, user_id: int, force_refresh: bool = False
    ) -> Optional[str]:
        """
        Get an access token for the user.
        Refreshes when the stored token expires within five minutes.

        Args:
            user_id: User identifier
            force_refresh: Refresh even if the stored token looks valid
                (used after the calendar API rejected it)

        Returns:
            Access token if available and valid, None otherwise
        """
        record = self._get_record(user_id, PROVIDER_GOOGLE)
        if record is None or not record.access_token:
            logger.debug(
                "No stored calendar token",
                extra={"context": {"user_id": user_id}},
            )
            return None

        if not force_refresh:
            if record.expires_at is None:
                # No expiration info, assume valid
                return record.access_token
            if to_utc(record.expires_at) - REFRESH_MARGIN > datetime.now(timezone.utc):
                return record.access_token

        return self.refresh_access_token(user_id)

    def refresh_access_token(self, user_id: int) -> Optional[str]:
        """
        Refresh the Google access token using the stored refresh token.

        Returns:
            New access token if refresh successful, None otherwise
        """
        record = self._get_record(user_id, PROVIDER_GOOGLE)
        if record is None or not record.refresh_token:
            logger.warning(f"No refresh token found for user {user_id}")
            return None

        client_id, client_secret = get_google_client_credentials()
        if not client_id or not client_secret:
            logger.error("Google OAuth client credentials not configured")
            return None

        data = {
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": record.refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            response = requests.post(GOOGLE_TOKEN_URL, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request error refreshing token for user {user_id}: {str(e)}")
            return None

        if response.status_code != 200:
            logger.error(
                f"Failed to refresh token for user {user_id}: "
                f"HTTP {response.status_code} - {response.text}"
            )
            return None

        payload = response.json()
        new_access_token = payload.get("access_token")
        if not new_access_token:
            logger.error(f"No access token in refresh response for user {user_id}")
            return None

        expires_in = payload.get("expires_in", 3600)  # Default 1 hour
        record.access_token = new_access_token
        record.expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        # Google may return a new refresh_token
        if payload.get("refresh_token"):
            record.refresh_token = payload["refresh_token"]

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to persist refreshed token for user {user_id}: {e}")
            return None

        logger.info(
            "Access token refreshed",
            extra={
                "context": {
                    "user_id": user_id,
                    "expires_at": record.expires_at.isoformat(),
                }
            },
        )
        return new_access_token

    def _get_record(self, user_id: int, provider: str) -> Optional[UserToken]:
        return (
            self.db.query(UserToken)
            .filter(UserToken.user_id == user_id, UserToken.provider == provider)
            .first()
        )
