"""Appointment booking backend: weekly availability, slot resolution and bookings."""
