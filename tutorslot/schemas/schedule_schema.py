"""Time interval, business hours, weekly schedule and blackout models."""

import logging
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tutorslot.config import settings
from tutorslot.errors import NotOwnerError
from tutorslot.utils import BOOKABLE_WEEKDAYS, MINUTES_PER_DAY, format_clock, parse_clock

logger = logging.getLogger(__name__)


class TimeInterval(BaseModel):
    """Half-open ``[start, end)`` span in minutes of day.

    Bounds are enforced here; ordering (``start < end``) is a booking rule
    checked by the engine so an inverted request can be rejected precisely.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, le=MINUTES_PER_DAY)
    end: int = Field(ge=0, le=MINUTES_PER_DAY)

    @field_validator("start", "end", mode="before")
    @classmethod
    def _accept_clock_strings(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_clock(value)
        return value

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeInterval":
        """Build an interval from ``HH:MM`` strings."""
        return cls(start=parse_clock(start), end=parse_clock(end))

    @property
    def is_ordered(self) -> bool:
        return self.start < self.end

    @property
    def duration_minutes(self) -> int:
        return max(self.end - self.start, 0)

    def contains(self, other: "TimeInterval") -> bool:
        """True if ``other`` lies entirely within this interval."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{format_clock(self.start)}-{format_clock(self.end)}"


class BusinessHoursPolicy(BaseModel):
    """Ordered, disjoint daily blocks a booking must fit inside."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[TimeInterval, ...]

    @model_validator(mode="after")
    def _check_blocks(self) -> "BusinessHoursPolicy":
        if not self.blocks:
            raise ValueError("Business hours need at least one block")
        previous_end = -1
        for block in self.blocks:
            if not block.is_ordered:
                raise ValueError(f"Business hours block {block} is inverted")
            if block.start < previous_end:
                raise ValueError("Business hours blocks must be ordered and disjoint")
            previous_end = block.end
        return self

    @classmethod
    def from_settings(cls) -> "BusinessHoursPolicy":
        return cls(
            blocks=tuple(
                TimeInterval(start=start, end=end)
                for start, end in settings.policy.business_hours
            )
        )

    def block_for(self, interval: TimeInterval) -> Optional[TimeInterval]:
        """Return the single block containing ``interval``, if any."""
        for block in self.blocks:
            if block.contains(interval):
                return block
        return None

    def describe(self) -> str:
        return " or ".join(str(block) for block in self.blocks)


class WeeklySchedule(BaseModel):
    """Recurring weekday availability declared by a provider.

    Keys are weekday names, Monday to Friday only. Each day holds a sorted
    list of distinct intervals.
    """

    slots: dict[str, list[TimeInterval]] = Field(default_factory=dict)

    @field_validator("slots")
    @classmethod
    def _weekdays_only(cls, value: dict[str, list[TimeInterval]]) -> dict[str, list[TimeInterval]]:
        for day in value:
            if day not in BOOKABLE_WEEKDAYS:
                raise ValueError(f"Weekly schedule only covers Monday-Friday, got {day!r}")
        return {
            day: sorted(set(intervals), key=lambda i: (i.start, i.end))
            for day, intervals in value.items()
        }

    def slots_for(self, weekday: str) -> list[TimeInterval]:
        return list(self.slots.get(weekday, []))

    def add(self, weekday: str, interval: TimeInterval) -> bool:
        """Add an interval; returns False if it was already declared."""
        if weekday not in BOOKABLE_WEEKDAYS:
            raise ValueError(f"Weekly schedule only covers Monday-Friday, got {weekday!r}")
        day = self.slots.setdefault(weekday, [])
        if interval in day:
            return False
        day.append(interval)
        day.sort(key=lambda i: (i.start, i.end))
        return True

    def remove(self, weekday: str, interval: TimeInterval) -> bool:
        day = self.slots.get(weekday, [])
        if interval not in day:
            return False
        day.remove(interval)
        if not day:
            del self.slots[weekday]
        return True


class BlackoutDate(BaseModel):
    """A whole day on which the provider is unavailable."""

    model_config = ConfigDict(frozen=True)

    date: date
    reason: str

    @field_validator("reason")
    @classmethod
    def _reason_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Blackout reason must not be empty")
        return value


class ProviderCalendar(BaseModel):
    """Everything the engine needs to know about one provider's calendar.

    Only the owning provider may change it; every mutator takes the acting
    user's id and raises NotOwnerError for anyone else.
    """

    provider_id: str
    weekly: WeeklySchedule = Field(default_factory=WeeklySchedule)
    blackouts: list[BlackoutDate] = Field(default_factory=list)

    def _require_owner(self, actor_id: str) -> None:
        if actor_id != self.provider_id:
            raise NotOwnerError(
                f"User {actor_id} cannot edit the calendar of provider {self.provider_id}"
            )

    def blackout_for(self, day: date) -> Optional[BlackoutDate]:
        for blackout in self.blackouts:
            if blackout.date == day:
                return blackout
        return None

    def add_slot(
        self,
        actor_id: str,
        weekday: str,
        interval: TimeInterval,
        policy: Optional[BusinessHoursPolicy] = None,
    ) -> bool:
        """Declare a weekly slot. It must be ordered and fit one business block."""
        self._require_owner(actor_id)
        if not interval.is_ordered:
            raise ValueError("End time must be later than start time.")
        policy = policy or BusinessHoursPolicy.from_settings()
        if policy.block_for(interval) is None:
            raise ValueError(
                f"Schedules must stay within one block: {policy.describe()}."
            )
        added = self.weekly.add(weekday, interval)
        if added:
            logger.debug("Provider %s declared %s %s", self.provider_id, weekday, interval)
        return added

    def remove_slot(self, actor_id: str, weekday: str, interval: TimeInterval) -> bool:
        self._require_owner(actor_id)
        return self.weekly.remove(weekday, interval)

    def add_blackout(self, actor_id: str, day: date, reason: str) -> BlackoutDate:
        """Block out a whole date, replacing any existing blackout for it."""
        self._require_owner(actor_id)
        blackout = BlackoutDate(date=day, reason=reason)
        self.blackouts = [b for b in self.blackouts if b.date != day] + [blackout]
        logger.info("Provider %s blacked out %s (%s)", self.provider_id, day, blackout.reason)
        return blackout

    def remove_blackout(self, actor_id: str, day: date) -> bool:
        self._require_owner(actor_id)
        before = len(self.blackouts)
        self.blackouts = [b for b in self.blackouts if b.date != day]
        return len(self.blackouts) != before
