"""Auto-decline proposals for pending requests left unanswered too long."""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Optional

from tutorslot.config import settings
from tutorslot.logging_context import get_request_logger
from tutorslot.schemas.booking_schema import Booking, BookingStatus

logger = get_request_logger(__name__)


def pending_dwell() -> timedelta:
    return timedelta(hours=settings.policy.pending_expiry_hours)


def expire_pending_bookings(
    bookings: Iterable[Booking],
    now: datetime,
    dwell: Optional[timedelta] = None,
) -> list[str]:
    """Ids of pending bookings created more than ``dwell`` before ``now``.

    Only proposes candidates. The caller applies each one with a
    conditional "declined only if still pending" update, so running this
    twice over fresh data never declines a booking twice.
    """
    dwell = dwell if dwell is not None else pending_dwell()
    expired = [
        b.id for b in bookings
        if b.status == BookingStatus.PENDING and now - b.created_at > dwell
    ]
    if expired:
        logger.info("%d pending booking(s) past %s: %s", len(expired), dwell, ", ".join(expired))
    return expired
