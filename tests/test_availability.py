"""Tests for provider availability and requester double-booking checks."""

import pytest

from tutorslot.engine.availability import (
    compute_availability,
    filter_available_providers,
    would_double_book_requester,
)
from tutorslot.engine.rejections import RejectionKind
from tutorslot.schemas.booking_schema import BookingStatus
from tests.conftest import (
    MONDAY,
    OTHER_TUTEE,
    OTHER_TUTOR,
    TUESDAY,
    TUTEE,
    TUTOR,
    WEDNESDAY,
    interval,
    make_booking,
    make_calendar,
)


class TestScenarios:
    def test_scenario_a_free_monday_slot(self, calendar):
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), [])
        assert result.available
        assert result.reason is None

    def test_scenario_b_confirmed_overlap_is_booked(self, calendar):
        existing = [make_booking(status=BookingStatus.CONFIRMED, start="09:30", end="10:30")]
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing)
        assert not result.available
        assert result.reason == "booked"
        assert result.rejection == RejectionKind.SLOT_TAKEN

    def test_scenario_d_pending_does_not_block(self, calendar):
        existing = [make_booking(status=BookingStatus.PENDING, start="09:00", end="10:00")]
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing)
        assert result.available


class TestPrecedence:
    def test_blackout_overrides_weekly_schedule(self, calendar):
        calendar.add_blackout(TUTOR, MONDAY, "Conference")
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), [])
        assert result.reason == "blocked: Conference"
        assert result.rejection == RejectionKind.PROVIDER_UNAVAILABLE

    def test_blackout_beats_booking_conflict(self, calendar):
        calendar.add_blackout(TUTOR, MONDAY, "Sick")
        existing = [make_booking(status=BookingStatus.CONFIRMED)]
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing)
        assert result.reason == "blocked: Sick"

    def test_blackout_on_other_date_ignored(self, calendar):
        calendar.add_blackout(TUTOR, TUESDAY, "Exam week")
        assert compute_availability(calendar, MONDAY, interval("09:00", "10:00"), []).available

    def test_no_weekly_slot_that_day(self, calendar):
        result = compute_availability(calendar, WEDNESDAY, interval("09:00", "10:00"), [])
        assert result.reason == "not available on Wednesday"

    def test_outside_declared_hours(self, calendar):
        result = compute_availability(calendar, MONDAY, interval("13:00", "14:00"), [])
        assert result.reason == "outside declared hours"

    def test_partially_outside_declared_hours(self):
        calendar = make_calendar(slots={"Monday": [("09:00", "10:00")]})
        result = compute_availability(calendar, MONDAY, interval("09:30", "10:30"), [])
        assert result.reason == "outside declared hours"


class TestContainment:
    @pytest.mark.parametrize("slot, available", [
        (("09:00", "10:00"), True),
        (("08:00", "12:00"), True),
        (("08:00", "09:30"), False),
        (("09:15", "11:00"), False),
    ])
    def test_needs_a_slot_covering_the_whole_request(self, slot, available):
        calendar = make_calendar(slots={"Monday": [slot]})
        result = compute_availability(calendar, MONDAY, interval("09:00", "10:00"), [])
        assert result.available is available

    def test_any_of_several_slots(self):
        calendar = make_calendar(slots={"Monday": [("08:00", "09:00"), ("09:00", "11:00")]})
        assert compute_availability(calendar, MONDAY, interval("09:30", "10:30"), []).available


class TestBookingConflicts:
    @pytest.mark.parametrize("status", [
        BookingStatus.CONFIRMED, BookingStatus.STARTED, BookingStatus.AWAITING_FEEDBACK,
    ])
    def test_active_statuses_block(self, calendar, status):
        existing = [make_booking(status=status)]
        assert not compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing).available

    @pytest.mark.parametrize("status", [
        BookingStatus.PENDING, BookingStatus.COMPLETED,
        BookingStatus.DECLINED, BookingStatus.CANCELLED,
    ])
    def test_inactive_statuses_do_not_block(self, calendar, status):
        existing = [make_booking(status=status)]
        assert compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing).available

    def test_other_providers_bookings_ignored(self, calendar):
        existing = [make_booking(provider_id=OTHER_TUTOR)]
        assert compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing).available

    def test_adjacent_booking_does_not_block(self, calendar):
        existing = [make_booking(start="10:00", end="11:00")]
        assert compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing).available

    def test_booking_does_not_conflict_with_itself(self, calendar):
        existing = [make_booking("BK-SELF", start="09:00", end="10:00")]
        result = compute_availability(
            calendar, MONDAY, interval("09:30", "10:30"), existing, exclude_booking_id="BK-SELF"
        )
        assert result.available

    def test_repeated_calls_do_not_mutate_inputs(self, calendar):
        existing = [make_booking()]
        before = [b.model_copy() for b in existing]
        for _ in range(3):
            compute_availability(calendar, MONDAY, interval("09:00", "10:00"), existing)
        assert existing == before


class TestRequesterDoubleBooking:
    def test_overlap_with_own_booking_any_provider(self):
        existing = [make_booking(requester_id=TUTEE, provider_id=OTHER_TUTOR)]
        assert would_double_book_requester(TUTEE, MONDAY, interval("09:00", "10:00"), existing)

    def test_other_requesters_ignored(self):
        existing = [make_booking(requester_id=OTHER_TUTEE)]
        assert not would_double_book_requester(TUTEE, MONDAY, interval("09:00", "10:00"), existing)

    def test_pending_own_booking_ignored(self):
        existing = [make_booking(requester_id=TUTEE, status=BookingStatus.PENDING)]
        assert not would_double_book_requester(TUTEE, MONDAY, interval("09:00", "10:00"), existing)

    def test_other_date_ignored(self):
        existing = [make_booking(requester_id=TUTEE, day=TUESDAY)]
        assert not would_double_book_requester(TUTEE, MONDAY, interval("09:00", "10:00"), existing)

    def test_excludes_itself(self):
        existing = [make_booking("BK-SELF", requester_id=TUTEE)]
        assert not would_double_book_requester(
            TUTEE, MONDAY, interval("09:00", "10:00"), existing, exclude_booking_id="BK-SELF"
        )


class TestFilterAvailableProviders:
    def test_keeps_input_order_and_drops_unavailable(self):
        calendars = [
            make_calendar("tutor-a"),
            make_calendar("tutor-b"),
            make_calendar("tutor-c", slots={"Tuesday": [("13:00", "17:00")]}),
            make_calendar("tutor-d"),
        ]
        existing = [make_booking(provider_id="tutor-b")]
        result = filter_available_providers(calendars, MONDAY, interval("09:00", "10:00"), existing)
        assert result == ["tutor-a", "tutor-d"]

    def test_accepts_a_generator_of_bookings(self):
        calendars = [make_calendar("tutor-a"), make_calendar("tutor-b")]
        existing = (b for b in [make_booking(provider_id="tutor-b")])
        result = filter_available_providers(calendars, MONDAY, interval("09:00", "10:00"), existing)
        assert result == ["tutor-a"]
