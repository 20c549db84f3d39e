"""
Persistent store contract consumed by the booking service.

A production store (a relational database behind the auth/storage
platform) must give the same guarantees as InMemoryBookingStore: commits
that would overlap an active booking for the same provider and date are
rejected at write time, as are commits that would give a requester two
overlapping active sessions with any providers, and status changes are
compare-and-set.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from tutorslot.schemas.booking_schema import Booking, BookingStatus
from tutorslot.schemas.schedule_schema import ProviderCalendar


class BookingStore(ABC):
    """Bookings and provider calendars keyed by opaque ids."""

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        ...

    @abstractmethod
    def list_bookings(self, status: Optional[BookingStatus] = None) -> list[Booking]:
        ...

    @abstractmethod
    def active_for_provider(self, provider_id: str, day: date) -> list[Booking]:
        ...

    @abstractmethod
    def active_for_requester(self, requester_id: str, day: date) -> list[Booking]:
        ...

    @abstractmethod
    def insert(self, booking: Booking) -> Booking:
        """Persist a new booking.

        Raises:
            BookingConflictError: if an active booking for the same provider
                and date overlaps it.
            RequesterConflictError: if the requester already holds an
                overlapping active booking with any provider.
        """

    @abstractmethod
    def compare_and_set_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        booking: Booking,
    ) -> bool:
        """Replace the stored booking only if its status is still ``expected``.

        Returns False when the stored status has moved on.

        Raises:
            BookingNotFoundError: if ``booking_id`` is unknown.
            BookingConflictError: if the new status is active and the booking
                would overlap another active booking for the provider.
            RequesterConflictError: if the new status is active and the
                requester already holds an overlapping active booking.
        """

    @abstractmethod
    def get_calendar(self, provider_id: str) -> ProviderCalendar:
        """Return the provider's calendar, empty if none was saved."""

    @abstractmethod
    def save_calendar(self, calendar: ProviderCalendar) -> None:
        ...

    def pending_bookings(self) -> list[Booking]:
        return self.list_bookings(BookingStatus.PENDING)
