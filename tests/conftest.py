"""Shared test fixtures and helpers.

The fixed clock reads Monday 2026-10-19 09:00 UTC, so with a three day lead
time the earliest bookable date is Thursday 2026-10-22.
"""

from datetime import date, datetime, timezone
from typing import Optional

import pytest

from tutorslot.clock import FixedClock
from tutorslot.notifications.dispatcher import InMemoryOutbox
from tutorslot.schemas.booking_schema import Booking, BookingRequest, BookingStatus, SessionMode
from tutorslot.schemas.schedule_schema import (
    BusinessHoursPolicy,
    ProviderCalendar,
    TimeInterval,
    WeeklySchedule,
)
from tutorslot.service import BookingService
from tutorslot.store.memory import InMemoryBookingStore

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)  # Monday
EARLIEST = date(2026, 10, 22)  # Thursday
MONDAY = date(2026, 10, 26)
TUESDAY = date(2026, 10, 27)
WEDNESDAY = date(2026, 10, 28)
SATURDAY = date(2026, 10, 24)

TUTOR = "tutor-1"
OTHER_TUTOR = "tutor-2"
TUTEE = "tutee-1"
OTHER_TUTEE = "tutee-2"


def interval(start: str, end: str) -> TimeInterval:
    return TimeInterval.parse(start, end)


def make_calendar(
    provider_id: str = TUTOR,
    slots: Optional[dict[str, list[tuple[str, str]]]] = None,
) -> ProviderCalendar:
    """Calendar with Monday mornings and Tuesday afternoons by default."""
    if slots is None:
        slots = {"Monday": [("08:00", "12:00")], "Tuesday": [("13:00", "17:00")]}
    return ProviderCalendar(
        provider_id=provider_id,
        weekly=WeeklySchedule(
            slots={day: [interval(s, e) for s, e in spans] for day, spans in slots.items()}
        ),
    )


def make_booking(
    booking_id: str = "BK-EXISTING",
    status: BookingStatus = BookingStatus.CONFIRMED,
    start: str = "09:30",
    end: str = "10:30",
    day: date = MONDAY,
    requester_id: str = OTHER_TUTEE,
    provider_id: str = TUTOR,
    created_at: datetime = NOW,
    subject: str = "Calculus",
    topic: Optional[str] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id,
        requester_id=requester_id,
        provider_id=provider_id,
        date=day,
        interval=interval(start, end),
        status=status,
        created_at=created_at,
        subject=subject,
        topic=topic,
    )


def make_request(
    start: str = "09:00",
    end: str = "10:00",
    day: date = MONDAY,
    requester_id: str = TUTEE,
    provider_id: str = TUTOR,
    subject: str = "Calculus",
    topic: Optional[str] = None,
    mode_of_session: Optional[SessionMode] = None,
) -> BookingRequest:
    return BookingRequest(
        requester_id=requester_id,
        provider_id=provider_id,
        date=day,
        interval=interval(start, end),
        subject=subject,
        topic=topic,
        mode_of_session=mode_of_session,
    )


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def policy():
    return BusinessHoursPolicy(blocks=(interval("08:00", "12:00"), interval("13:00", "17:00")))


@pytest.fixture
def calendar():
    return make_calendar()


@pytest.fixture
def store(calendar):
    return InMemoryBookingStore(calendars=[calendar])


@pytest.fixture
def outbox():
    return InMemoryOutbox()


@pytest.fixture
def service(store, clock, outbox, policy):
    return BookingService(store, clock=clock, dispatcher=outbox, policy=policy, lead_days=3)
