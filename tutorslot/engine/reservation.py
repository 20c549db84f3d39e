"""
Reservation orchestration over the engine checks.

Runs structural rules, then provider availability, then the requester's
own calendar, stopping at the first failure. A successful reservation
yields a new pending Booking that the caller still has to commit; the
store re-checks overlap at commit time.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from tutorslot.engine.availability import compute_availability, would_double_book_requester
from tutorslot.engine.rejections import RejectionKind, ReservationResult
from tutorslot.engine.rules import check_structure
from tutorslot.logging_context import get_request_logger
from tutorslot.schemas.booking_schema import Booking, BookingRequest, BookingStatus
from tutorslot.schemas.schedule_schema import BusinessHoursPolicy, ProviderCalendar

logger = get_request_logger(__name__)


def new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:8].upper()}"


def reserve(
    request: BookingRequest,
    calendar: ProviderCalendar,
    existing_bookings: Iterable[Booking],
    now: datetime,
    policy: Optional[BusinessHoursPolicy] = None,
    lead_days: Optional[int] = None,
) -> ReservationResult:
    """Check a booking request and build the pending booking if it passes."""
    if request.provider_id != calendar.provider_id:
        raise ValueError(
            f"Calendar belongs to {calendar.provider_id}, request targets {request.provider_id}"
        )

    structural = check_structure(request.date, request.interval, now, policy, lead_days)
    if not structural.passed:
        logger.info(
            "Request by %s rejected (%s): %s",
            request.requester_id, structural.rejection.value, structural.message,
        )
        return ReservationResult.rejected(structural.rejection, structural.message)

    bookings = list(existing_bookings)

    availability = compute_availability(calendar, request.date, request.interval, bookings)
    if not availability.available:
        logger.info(
            "Provider %s unavailable for %s %s: %s",
            request.provider_id, request.date, request.interval, availability.reason,
        )
        if availability.rejection == RejectionKind.SLOT_TAKEN:
            message = "This time slot has already been booked with this tutor."
        else:
            message = f"Tutor is unavailable: {availability.reason}."
        return ReservationResult.rejected(availability.rejection, message)

    if would_double_book_requester(request.requester_id, request.date, request.interval, bookings):
        logger.info("Requester %s already has a session at %s %s",
                    request.requester_id, request.date, request.interval)
        return ReservationResult.rejected(
            RejectionKind.REQUESTER_DOUBLE_BOOKED,
            "You already have a session that overlaps this time.",
        )

    booking = Booking(
        id=new_booking_id(),
        requester_id=request.requester_id,
        provider_id=request.provider_id,
        date=request.date,
        interval=request.interval,
        status=BookingStatus.PENDING,
        created_at=now,
        subject=request.subject,
        topic=request.topic,
        mode_of_session=request.mode_of_session,
    )
    logger.info("Reserved %s for %s with %s on %s %s",
                booking.id, booking.requester_id, booking.provider_id, booking.date, booking.interval)
    return ReservationResult.accepted(booking)
