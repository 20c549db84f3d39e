"""Tests for interval, business hours and provider calendar models."""

from datetime import date

import pytest
from pydantic import ValidationError

from tutorslot.errors import NotOwnerError
from tutorslot.schemas.schedule_schema import (
    BlackoutDate,
    BusinessHoursPolicy,
    TimeInterval,
    WeeklySchedule,
)
from tests.conftest import MONDAY, OTHER_TUTOR, TUTOR, interval, make_calendar


class TestTimeInterval:
    def test_accepts_clock_strings(self):
        assert TimeInterval(start="08:00", end="09:30") == TimeInterval(start=480, end=570)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            TimeInterval(start=0, end=1500)

    def test_inverted_interval_is_constructible(self):
        inverted = interval("10:00", "09:00")
        assert not inverted.is_ordered
        assert inverted.duration_minutes == 0

    def test_contains_is_inclusive_of_edges(self):
        assert interval("08:00", "12:00").contains(interval("08:00", "12:00"))
        assert not interval("08:00", "12:00").contains(interval("11:00", "12:30"))

    def test_str(self):
        assert str(interval("08:00", "09:30")) == "08:00-09:30"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            interval("08:00", "09:00").start = 0


class TestBusinessHoursPolicy:
    def test_from_settings(self):
        policy = BusinessHoursPolicy.from_settings()
        assert policy.describe() == "08:00-12:00 or 13:00-17:00"

    def test_block_for(self, policy):
        assert policy.block_for(interval("13:30", "14:30")) == interval("13:00", "17:00")
        assert policy.block_for(interval("11:30", "13:30")) is None

    def test_overlapping_blocks_rejected(self):
        with pytest.raises(ValidationError):
            BusinessHoursPolicy(blocks=(interval("08:00", "12:00"), interval("11:00", "14:00")))

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            BusinessHoursPolicy(blocks=())


class TestWeeklySchedule:
    def test_saturday_key_rejected(self):
        with pytest.raises(ValidationError):
            WeeklySchedule(slots={"Saturday": [interval("09:00", "10:00")]})

    def test_slots_sorted_and_deduplicated(self):
        schedule = WeeklySchedule(slots={"Monday": [
            interval("13:00", "14:00"), interval("08:00", "09:00"), interval("13:00", "14:00"),
        ]})
        assert schedule.slots_for("Monday") == [interval("08:00", "09:00"), interval("13:00", "14:00")]

    def test_add_weekend_rejected(self):
        with pytest.raises(ValueError):
            WeeklySchedule().add("Sunday", interval("09:00", "10:00"))


class TestBlackoutDate:
    def test_reason_stripped(self):
        assert BlackoutDate(date=MONDAY, reason="  Conference ").reason == "Conference"

    def test_blank_reason_rejected(self):
        with pytest.raises(ValidationError):
            BlackoutDate(date=MONDAY, reason="   ")


class TestProviderCalendar:
    def test_add_slot(self, policy):
        calendar = make_calendar()
        assert calendar.add_slot(TUTOR, "Friday", interval("13:00", "15:00"), policy)
        assert calendar.weekly.slots_for("Friday") == [interval("13:00", "15:00")]

    def test_duplicate_slot_not_added(self, policy):
        calendar = make_calendar()
        assert not calendar.add_slot(TUTOR, "Monday", interval("08:00", "12:00"), policy)

    def test_slot_across_lunch_rejected(self, policy):
        with pytest.raises(ValueError, match="within one block"):
            make_calendar().add_slot(TUTOR, "Friday", interval("11:00", "14:00"), policy)

    def test_inverted_slot_rejected(self, policy):
        with pytest.raises(ValueError, match="later than start"):
            make_calendar().add_slot(TUTOR, "Friday", interval("10:00", "09:00"), policy)

    def test_weekend_slot_rejected(self, policy):
        with pytest.raises(ValueError):
            make_calendar().add_slot(TUTOR, "Saturday", interval("09:00", "10:00"), policy)

    def test_non_owner_rejected(self, policy):
        with pytest.raises(NotOwnerError):
            make_calendar().add_slot(OTHER_TUTOR, "Friday", interval("09:00", "10:00"), policy)

    def test_remove_last_slot_drops_day(self):
        calendar = make_calendar()
        assert calendar.remove_slot(TUTOR, "Monday", interval("08:00", "12:00"))
        assert "Monday" not in calendar.weekly.slots
        assert not calendar.remove_slot(TUTOR, "Monday", interval("08:00", "12:00"))

    def test_blackout_replaces_same_date(self):
        calendar = make_calendar()
        calendar.add_blackout(TUTOR, MONDAY, "Conference")
        calendar.add_blackout(TUTOR, MONDAY, "Dentist")
        assert len(calendar.blackouts) == 1
        assert calendar.blackout_for(MONDAY).reason == "Dentist"

    def test_remove_blackout(self):
        calendar = make_calendar()
        calendar.add_blackout(TUTOR, MONDAY, "Conference")
        assert calendar.remove_blackout(TUTOR, MONDAY)
        assert calendar.blackout_for(MONDAY) is None
        assert not calendar.remove_blackout(TUTOR, date(2026, 11, 2))

    def test_blackout_non_owner(self):
        with pytest.raises(NotOwnerError):
            make_calendar().add_blackout(OTHER_TUTOR, MONDAY, "Conference")
