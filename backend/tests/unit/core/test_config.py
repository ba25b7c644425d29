"""
Unit tests for the booking settings read from the environment.
"""

import pytest

from booking.core.config import effective_claim_granularity, load_booking_settings


@pytest.mark.unit
class TestClaimGranularity:
    @pytest.mark.parametrize(
        "granularity,interval,duration,expected",
        [
            (5, 30, 60, 5),
            (1, 30, 60, 1),
            (10, 30, 60, 5),
            (30, 30, 60, 15),
            (5, 20, 45, 5),
            (7, 30, 60, 1),
        ],
    )
    def test_effective_granularity_divides_slot_grid(
        self, granularity, interval, duration, expected
    ):
        effective = effective_claim_granularity(granularity, interval, duration)

        assert effective == expected
        assert interval % effective == 0
        assert duration % effective == 0

    def test_settings_use_effective_granularity(self, monkeypatch):
        monkeypatch.setenv("SLOT_CLAIM_GRANULARITY_MINUTES", "30")
        monkeypatch.setenv("SLOT_INTERVAL_MINUTES", "30")
        monkeypatch.setenv("APPOINTMENT_DURATION_MINUTES", "60")

        assert load_booking_settings().slot_claim_granularity_minutes == 15

    def test_invalid_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("SLOT_INTERVAL_MINUTES", "abc")
        monkeypatch.setenv("APPOINTMENT_DURATION_MINUTES", "-5")

        settings = load_booking_settings()

        assert settings.slot_interval_minutes == 30
        assert settings.appointment_duration_minutes == 60
