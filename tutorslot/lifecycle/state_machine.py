"""
Finite state machine for the booking status lifecycle.

    pending   --confirm-->            confirmed
    pending   --decline | timeout-->  declined
    confirmed --start-->              started
    confirmed --cancel | blackout-->  cancelled
    started   --end_session-->        completed
    started   --request_feedback-->   awaiting_feedback
    awaiting_feedback --submit_feedback--> completed

completed, declined and cancelled are terminal: any trigger from them is
refused with ALREADY_TERMINAL. Refusals are returned, not raised, so the
caller can show the reason.

Usage:
    lifecycle = BookingLifecycle(booking)
    result = lifecycle.transition(LifecycleTrigger.CONFIRM)
    assert lifecycle.current_status == BookingStatus.CONFIRMED
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from tutorslot.clock import Clock, system_clock
from tutorslot.engine.rejections import RejectionKind
from tutorslot.schemas.booking_schema import TERMINAL_STATUSES, Booking, BookingStatus

logger = logging.getLogger(__name__)


class LifecycleTrigger(str, Enum):
    """Events that move a booking between statuses."""
    CONFIRM = "confirm"
    DECLINE = "decline"
    TIMEOUT = "timeout"
    START = "start"
    CANCEL = "cancel"
    BLACKOUT_ADDED = "blackout_added"
    END_SESSION = "end_session"
    REQUEST_FEEDBACK = "request_feedback"
    SUBMIT_FEEDBACK = "submit_feedback"


class TransitionCause(str, Enum):
    """Why a transition happened, for notification dispatch."""
    PROVIDER_CONFIRMED = "provider_confirmed"
    PROVIDER_DECLINED = "provider_declined"
    AUTO_DECLINED = "auto_declined"
    SESSION_STARTED = "session_started"
    PROVIDER_CANCELLED = "provider_cancelled"
    BLACKOUT_CANCELLED = "blackout_cancelled"
    SESSION_COMPLETED = "session_completed"
    FEEDBACK_REQUESTED = "feedback_requested"
    FEEDBACK_SUBMITTED = "feedback_submitted"


class Actor(str, Enum):
    """Party allowed to fire a trigger."""
    PROVIDER = "provider"
    REQUESTER = "requester"
    SYSTEM = "system"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: LifecycleTrigger
    cause: TransitionCause
    actor: Actor = Actor.PROVIDER


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of applying a trigger to a booking."""
    success: bool
    booking: Booking
    from_status: BookingStatus
    to_status: Optional[BookingStatus] = None
    cause: Optional[TransitionCause] = None
    rejection: Optional[RejectionKind] = None
    message: str = ""


@dataclass
class StatusEntry:
    """Recorded history entry for a status visit."""
    status: BookingStatus
    entered_at: datetime
    trigger: Optional[LifecycleTrigger] = None


TRANSITIONS: list[Transition] = [
    # --- Provider answers a request ---
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED,
               LifecycleTrigger.CONFIRM, TransitionCause.PROVIDER_CONFIRMED),
    Transition(BookingStatus.PENDING, BookingStatus.DECLINED,
               LifecycleTrigger.DECLINE, TransitionCause.PROVIDER_DECLINED),
    Transition(BookingStatus.PENDING, BookingStatus.DECLINED,
               LifecycleTrigger.TIMEOUT, TransitionCause.AUTO_DECLINED, Actor.SYSTEM),

    # --- Confirmed session ---
    Transition(BookingStatus.CONFIRMED, BookingStatus.STARTED,
               LifecycleTrigger.START, TransitionCause.SESSION_STARTED),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED,
               LifecycleTrigger.CANCEL, TransitionCause.PROVIDER_CANCELLED),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED,
               LifecycleTrigger.BLACKOUT_ADDED, TransitionCause.BLACKOUT_CANCELLED, Actor.SYSTEM),

    # --- Session end ---
    Transition(BookingStatus.STARTED, BookingStatus.COMPLETED,
               LifecycleTrigger.END_SESSION, TransitionCause.SESSION_COMPLETED),
    Transition(BookingStatus.STARTED, BookingStatus.AWAITING_FEEDBACK,
               LifecycleTrigger.REQUEST_FEEDBACK, TransitionCause.FEEDBACK_REQUESTED),
    Transition(BookingStatus.AWAITING_FEEDBACK, BookingStatus.COMPLETED,
               LifecycleTrigger.SUBMIT_FEEDBACK, TransitionCause.FEEDBACK_SUBMITTED, Actor.REQUESTER),
]


def find_transition(status: BookingStatus, trigger: LifecycleTrigger) -> Optional[Transition]:
    for t in TRANSITIONS:
        if t.from_status == status and t.trigger == trigger:
            return t
    return None


def valid_triggers(status: BookingStatus) -> list[LifecycleTrigger]:
    """Return all triggers valid from ``status``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == status]


def apply_transition(
    booking: Booking,
    trigger: LifecycleTrigger,
    reason: Optional[str] = None,
) -> TransitionResult:
    """
    Compute the result of firing ``trigger`` on ``booking``.

    Args:
        booking: Current snapshot; it is not modified.
        trigger: The event to apply.
        reason: Optional note stored as the decline reason on declines.

    Returns:
        A TransitionResult holding the updated copy on success, or the
        original booking with a rejection.
    """
    current = booking.status
    if current in TERMINAL_STATUSES:
        return TransitionResult(
            success=False,
            booking=booking,
            from_status=current,
            rejection=RejectionKind.ALREADY_TERMINAL,
            message=f"Booking {booking.id} is already {current.value}.",
        )

    t = find_transition(current, trigger)
    if t is None:
        valid = [v.value for v in valid_triggers(current)]
        return TransitionResult(
            success=False,
            booking=booking,
            from_status=current,
            rejection=RejectionKind.INVALID_TRANSITION,
            message=(
                f"No valid transition from '{current.value}' with trigger "
                f"'{trigger.value}'. Valid triggers: {valid}"
            ),
        )

    changes = {}
    if t.to_status == BookingStatus.DECLINED and reason:
        changes["decline_reason"] = reason.strip()

    updated = booking.with_status(t.to_status, **changes)
    return TransitionResult(
        success=True,
        booking=updated,
        from_status=current,
        to_status=t.to_status,
        cause=t.cause,
        message=f"Booking {booking.id} {t.to_status.value}.",
    )


class BookingLifecycle:
    """
    Tracks one booking through its lifecycle with a visit history.

    Every transition must be listed in TRANSITIONS; anything else is
    refused with the list of triggers that would have been accepted.
    """

    def __init__(self, booking: Booking, clock: Clock = system_clock) -> None:
        self._booking = booking
        self._clock = clock
        self._history: list[StatusEntry] = [
            StatusEntry(status=booking.status, entered_at=clock())
        ]

    @property
    def booking(self) -> Booking:
        return self._booking

    @property
    def current_status(self) -> BookingStatus:
        return self._booking.status

    def transition(self, trigger: LifecycleTrigger, reason: Optional[str] = None) -> TransitionResult:
        result = apply_transition(self._booking, trigger, reason)
        if not result.success:
            logger.debug("Transition refused for %s: %s", self._booking.id, result.message)
            return result

        self._booking = result.booking
        self._history.append(StatusEntry(
            status=result.to_status,
            entered_at=self._clock(),
            trigger=trigger,
        ))
        logger.debug(
            "Status transition: %s -> %s (trigger: %s)",
            result.from_status.value, result.to_status.value, trigger.value,
        )
        return result

    def get_valid_triggers(self) -> list[LifecycleTrigger]:
        return valid_triggers(self.current_status)

    def get_history(self) -> list[StatusEntry]:
        """Return the full status transition history."""
        return list(self._history)

    def get_status_trace(self) -> list[str]:
        """Return ordered list of status names visited."""
        return [entry.status.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES
