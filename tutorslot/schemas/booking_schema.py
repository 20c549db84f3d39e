"""Booking and booking request data models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from tutorslot.clock import as_utc
from tutorslot.schemas.schedule_schema import TimeInterval


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    STARTED = "started"
    AWAITING_FEEDBACK = "awaiting_feedback"
    COMPLETED = "completed"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class SessionMode(str, Enum):
    """How the session is held. Values match the booking form options."""
    FACE_TO_FACE = "Face-to-Face"
    ONLINE = "Online"


# Statuses that occupy calendar space. Pending requests never hold a slot.
ACTIVE_STATUSES = frozenset({
    BookingStatus.CONFIRMED,
    BookingStatus.STARTED,
    BookingStatus.AWAITING_FEEDBACK,
})

TERMINAL_STATUSES = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.DECLINED,
    BookingStatus.CANCELLED,
})

FINISHED_STATUSES = frozenset({
    BookingStatus.AWAITING_FEEDBACK,
    BookingStatus.COMPLETED,
})


class BookingRequest(BaseModel):
    """A requester's proposed session, not persisted until accepted."""
    requester_id: str
    provider_id: str
    date: date
    interval: TimeInterval
    subject: str
    topic: Optional[str] = None
    mode_of_session: Optional[SessionMode] = None


class Booking(BaseModel):
    """A session between a requester and a provider."""
    id: str
    requester_id: str
    provider_id: str
    date: date
    interval: TimeInterval
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime
    subject: str = ""
    topic: Optional[str] = None
    mode_of_session: Optional[SessionMode] = None
    decline_reason: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def with_status(self, status: BookingStatus, **changes) -> "Booking":
        """Return a copy in the new status; the original is left untouched."""
        return self.model_copy(update={"status": status, **changes})
