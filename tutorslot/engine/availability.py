"""
Provider availability for a single date and interval.

Precedence, first match wins:
    blackout date > no weekly slot that day > outside declared hours
    > overlaps an active booking > available

Every function here is pure over the snapshots it is given, so it can be
called once per candidate provider while ranking a list.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional

from tutorslot.engine.intervals import active_on, first_conflict
from tutorslot.engine.rejections import AvailabilityResult, RejectionKind
from tutorslot.logging_context import get_request_logger
from tutorslot.schemas.booking_schema import Booking
from tutorslot.schemas.schedule_schema import ProviderCalendar, TimeInterval
from tutorslot.utils import weekday_name

logger = get_request_logger(__name__)


def compute_availability(
    calendar: ProviderCalendar,
    day: date,
    interval: TimeInterval,
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> AvailabilityResult:
    """Decide whether ``calendar``'s provider can take ``interval`` on ``day``.

    Args:
        calendar: The provider's weekly schedule and blackout dates.
        day: Target calendar date.
        interval: Proposed session time.
        existing_bookings: Any bookings snapshot; it is filtered here to the
            provider, the date and active statuses.
        exclude_booking_id: A booking being rescheduled, so it does not
            conflict with its own prior slot.
    """
    blackout = calendar.blackout_for(day)
    if blackout is not None:
        return AvailabilityResult.unavailable(f"blocked: {blackout.reason}")

    weekday = weekday_name(day)
    declared = calendar.weekly.slots_for(weekday)
    if not declared:
        return AvailabilityResult.unavailable(f"not available on {weekday}")

    if not any(slot.contains(interval) for slot in declared):
        return AvailabilityResult.unavailable("outside declared hours")

    occupied = active_on(
        existing_bookings,
        day,
        provider_id=calendar.provider_id,
        exclude_booking_id=exclude_booking_id,
    )
    clash = first_conflict(interval, occupied)
    if clash is not None:
        logger.debug(
            "Provider %s already booked %s on %s (booking %s)",
            calendar.provider_id, clash.interval, day, clash.id,
        )
        return AvailabilityResult.unavailable("booked", RejectionKind.SLOT_TAKEN)

    return AvailabilityResult.ok()


def would_double_book_requester(
    requester_id: str,
    day: date,
    interval: TimeInterval,
    existing_bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """True if the requester already holds an overlapping active booking that day."""
    own = active_on(
        existing_bookings,
        day,
        requester_id=requester_id,
        exclude_booking_id=exclude_booking_id,
    )
    return first_conflict(interval, own) is not None


def filter_available_providers(
    calendars: Sequence[ProviderCalendar],
    day: date,
    interval: TimeInterval,
    existing_bookings: Iterable[Booking],
) -> list[str]:
    """Provider ids that can take the interval, in the order given."""
    bookings = list(existing_bookings)
    return [
        calendar.provider_id
        for calendar in calendars
        if compute_availability(calendar, day, interval, bookings).available
    ]
