"""Availability and conflict engine for tutoring session bookings."""

__version__ = "0.1.0"
