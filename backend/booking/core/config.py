"""
Centralized configuration module for application-wide settings.

This module provides centralized configuration for timezone handling and
for the booking rules (appointment length, slot granularity, calendar
timeouts), ensuring consistency across the slot engine and the API.
"""

import logging
import math
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'America/New_York', 'UTC')
            Default: 'UTC'
            Used as the timezone of seller profiles created without one.
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


# Global timezone instance - initialized once at import time
APP_TZ = get_app_timezone()


def log_timezone_config():
    """Log the active timezone configuration at startup."""
    logger.info(
        "Timezone configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "tz_env_var": os.getenv("TZ", "UTC"),
            }
        },
    )


# ===========================
# Booking Configuration
# ===========================

DEFAULT_APPOINTMENT_DURATION_MINUTES = 60
DEFAULT_SLOT_INTERVAL_MINUTES = 30
DEFAULT_SLOT_CLAIM_GRANULARITY_MINUTES = 5
DEFAULT_CALENDAR_API_TIMEOUT_SECONDS = 5.0


def _get_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer '{raw}' for {name}. Falling back to {default}."
        )
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}. Using {default}.")
        return default
    return value


def get_appointment_duration_minutes() -> int:
    """
    Get the fixed appointment length.

    Environment Variables:
        APPOINTMENT_DURATION_MINUTES: Length of every appointment
            Default: 60
    """
    return _get_positive_int(
        "APPOINTMENT_DURATION_MINUTES", DEFAULT_APPOINTMENT_DURATION_MINUTES
    )


def get_slot_interval_minutes() -> int:
    """
    Get the step between candidate slot starts.

    Environment Variables:
        SLOT_INTERVAL_MINUTES: Candidate start granularity
            Default: 30 (09:00, 09:30, ... for a 09:00 block)
    """
    return _get_positive_int("SLOT_INTERVAL_MINUTES", DEFAULT_SLOT_INTERVAL_MINUTES)


def get_slot_claim_granularity_minutes() -> int:
    """
    Get the size of the occupancy buckets backing the non-overlap constraint.

    Environment Variables:
        SLOT_CLAIM_GRANULARITY_MINUTES: Bucket size in minutes
            Default: 5
            load_booking_settings() narrows it so every slot boundary lands
            on a bucket edge; see effective_claim_granularity().
    """
    return _get_positive_int(
        "SLOT_CLAIM_GRANULARITY_MINUTES", DEFAULT_SLOT_CLAIM_GRANULARITY_MINUTES
    )


def get_calendar_api_timeout_seconds() -> float:
    """
    Get the timeout applied to every calendar and OAuth HTTP call.

    Environment Variables:
        CALENDAR_API_TIMEOUT_SECONDS: Timeout in seconds
            Default: 5
    """
    raw = os.getenv("CALENDAR_API_TIMEOUT_SECONDS")
    if raw is None or not raw.strip():
        return DEFAULT_CALENDAR_API_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        logger.warning(
            f"Invalid timeout '{raw}' for CALENDAR_API_TIMEOUT_SECONDS. "
            f"Falling back to {DEFAULT_CALENDAR_API_TIMEOUT_SECONDS}."
        )
        return DEFAULT_CALENDAR_API_TIMEOUT_SECONDS
    if value <= 0:
        return DEFAULT_CALENDAR_API_TIMEOUT_SECONDS
    return value


# Every UTC offset in current use is a whole multiple of 15 minutes.
UTC_OFFSET_STEP_MINUTES = 15


def effective_claim_granularity(granularity: int, interval: int, duration: int) -> int:
    """
    Largest bucket size that divides the configured granularity, the slot
    interval, the appointment length and the UTC offset step.

    Slot starts and ends then always fall on bucket edges, so back-to-back
    appointments never share a bucket.
    """
    effective = math.gcd(granularity, interval, duration, UTC_OFFSET_STEP_MINUTES)
    if effective != granularity:
        logger.warning(
            f"SLOT_CLAIM_GRANULARITY_MINUTES={granularity} does not divide the slot "
            f"grid (interval {interval}, duration {duration}). Using {effective}."
        )
    return effective


@dataclass(frozen=True)
class BookingSettings:
    """Booking rules injected into the slot engine and the coordinator."""

    appointment_duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES
    slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
    slot_claim_granularity_minutes: int = DEFAULT_SLOT_CLAIM_GRANULARITY_MINUTES
    calendar_api_timeout_seconds: float = DEFAULT_CALENDAR_API_TIMEOUT_SECONDS


def load_booking_settings() -> BookingSettings:
    """Build BookingSettings from the environment."""
    duration = get_appointment_duration_minutes()
    interval = get_slot_interval_minutes()
    return BookingSettings(
        appointment_duration_minutes=duration,
        slot_interval_minutes=interval,
        slot_claim_granularity_minutes=effective_claim_granularity(
            get_slot_claim_granularity_minutes(), interval, duration
        ),
        calendar_api_timeout_seconds=get_calendar_api_timeout_seconds(),
    )


def log_booking_config(settings: BookingSettings) -> None:
    """Log the active booking rules at startup."""
    logger.info(
        "Booking configuration initialized",
        extra={
            "context": {
                "appointment_duration_minutes": settings.appointment_duration_minutes,
                "slot_interval_minutes": settings.slot_interval_minutes,
                "slot_claim_granularity_minutes": settings.slot_claim_granularity_minutes,
                "calendar_api_timeout_seconds": settings.calendar_api_timeout_seconds,
            }
        },
    )


# ===========================
# Google OAuth Configuration
# ===========================


def get_google_client_credentials() -> tuple[str | None, str | None]:
    """
    Get the OAuth client used to refresh calendar access tokens.

    Environment Variables:
        GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET: OAuth client credentials
            Default: None (token refresh disabled)
    """
    return os.getenv("GOOGLE_CLIENT_ID"), os.getenv("GOOGLE_CLIENT_SECRET")


def is_truthy(value: str | None) -> bool:
    """Interpret "true", "1" and "yes" (case-insensitive) as True."""
    return (value or "").strip().lower() in ("true", "1", "yes")
