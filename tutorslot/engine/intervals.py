"""Interval overlap primitives shared by every conflict check."""

from collections.abc import Iterable
from datetime import date
from typing import Optional

from tutorslot.schemas.booking_schema import ACTIVE_STATUSES, Booking
from tutorslot.schemas.schedule_schema import TimeInterval


def conflicts(a: TimeInterval, b: TimeInterval) -> bool:
    """Half-open overlap: ``[a.start, a.end)`` and ``[b.start, b.end)`` intersect."""
    return a.start < b.end and b.start < a.end


def active_on(
    bookings: Iterable[Booking],
    day: date,
    *,
    provider_id: Optional[str] = None,
    requester_id: Optional[str] = None,
    exclude_booking_id: Optional[str] = None,
) -> list[Booking]:
    """Filter bookings down to active ones on ``day`` for one party."""
    return [
        b for b in bookings
        if b.date == day
        and b.status in ACTIVE_STATUSES
        and (provider_id is None or b.provider_id == provider_id)
        and (requester_id is None or b.requester_id == requester_id)
        and (exclude_booking_id is None or b.id != exclude_booking_id)
    ]


def first_conflict(interval: TimeInterval, bookings: Iterable[Booking]) -> Optional[Booking]:
    for booking in bookings:
        if conflicts(interval, booking.interval):
            return booking
    return None
