"""
In-memory booking store.

Used by tests, the CLI and as the reference for a real backend. All
check-then-write sequences run under one lock, which is what closes the
race between two requesters passing the availability check for the same
slot before either booking is committed.
"""

import threading
from collections.abc import Iterable
from datetime import date
from typing import Optional

from tutorslot.engine.intervals import active_on, first_conflict
from tutorslot.errors import BookingConflictError, BookingNotFoundError, RequesterConflictError
from tutorslot.logging_context import get_request_logger
from tutorslot.schemas.booking_schema import ACTIVE_STATUSES, Booking, BookingStatus
from tutorslot.schemas.schedule_schema import ProviderCalendar
from tutorslot.store.base import BookingStore

logger = get_request_logger(__name__)


class InMemoryBookingStore(BookingStore):
    """Dict-backed store with commit-time overlap rejection."""

    def __init__(
        self,
        bookings: Optional[Iterable[Booking]] = None,
        calendars: Optional[Iterable[ProviderCalendar]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        self._calendars: dict[str, ProviderCalendar] = {
            c.provider_id: c for c in calendars or []
        }

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            return self._bookings.get(booking_id)

    def list_bookings(self, status: Optional[BookingStatus] = None) -> list[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        if status is None:
            return bookings
        return [b for b in bookings if b.status == status]

    def active_for_provider(self, provider_id: str, day: date) -> list[Booking]:
        with self._lock:
            return active_on(self._bookings.values(), day, provider_id=provider_id)

    def active_for_requester(self, requester_id: str, day: date) -> list[Booking]:
        with self._lock:
            return active_on(self._bookings.values(), day, requester_id=requester_id)

    def _check_overlap(self, booking: Booking) -> None:
        occupied = active_on(
            self._bookings.values(),
            booking.date,
            provider_id=booking.provider_id,
            exclude_booking_id=booking.id,
        )
        clash = first_conflict(booking.interval, occupied)
        if clash is not None:
            logger.warning("Commit of %s rejected: overlaps %s", booking.id, clash.id)
            raise BookingConflictError(booking.id, clash.id)

        own = active_on(
            self._bookings.values(),
            booking.date,
            requester_id=booking.requester_id,
            exclude_booking_id=booking.id,
        )
        clash = first_conflict(booking.interval, own)
        if clash is not None:
            logger.warning(
                "Commit of %s rejected: requester %s already holds %s",
                booking.id, booking.requester_id, clash.id,
            )
            raise RequesterConflictError(booking.id, clash.id)

    def insert(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id in self._bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            self._check_overlap(booking)
            self._bookings[booking.id] = booking
        logger.info("Booking stored: %s (%s)", booking.id, booking.status.value)
        return booking

    def compare_and_set_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        booking: Booking,
    ) -> bool:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found.")
            if current.status != expected:
                logger.info(
                    "Stale update for %s: expected %s, found %s",
                    booking_id, expected.value, current.status.value,
                )
                return False
            if booking.status in ACTIVE_STATUSES:
                self._check_overlap(booking)
            self._bookings[booking_id] = booking
        logger.info("Booking %s: %s -> %s", booking_id, expected.value, booking.status.value)
        return True

    def get_calendar(self, provider_id: str) -> ProviderCalendar:
        with self._lock:
            calendar = self._calendars.get(provider_id)
        if calendar is None:
            return ProviderCalendar(provider_id=provider_id)
        return calendar.model_copy(deep=True)

    def save_calendar(self, calendar: ProviderCalendar) -> None:
        with self._lock:
            self._calendars[calendar.provider_id] = calendar.model_copy(deep=True)

    def reset(self) -> None:
        """Clear all bookings and calendars. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()
            self._calendars.clear()
