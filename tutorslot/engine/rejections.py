"""
Typed rejection reasons and result containers.

Every engine decision comes back as a value the caller branches on to
show a precise message. Nothing here is raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tutorslot.schemas.booking_schema import Booking


class RejectionKind(str, Enum):
    """Why a booking request or status change was refused."""
    # Structural, provider independent
    TOO_SOON = "too_soon"
    WEEKEND = "weekend"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    INVALID_ORDER = "invalid_order"
    # Provider specific
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    SLOT_TAKEN = "slot_taken"
    REQUESTER_DOUBLE_BOOKED = "requester_double_booked"
    # Commit-time race lost against a concurrent writer
    ALREADY_BOOKED = "already_booked"
    # Lifecycle
    ALREADY_TERMINAL = "already_terminal"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class RuleResult:
    """Outcome of the structural booking rules."""
    passed: bool
    rejection: Optional[RejectionKind] = None
    message: str = ""

    @classmethod
    def ok(cls) -> "RuleResult":
        return cls(passed=True)

    @classmethod
    def reject(cls, kind: RejectionKind, message: str) -> "RuleResult":
        return cls(passed=False, rejection=kind, message=message)


@dataclass(frozen=True)
class AvailabilityResult:
    """Whether a provider can take a given interval on a given date.

    ``reason`` is one of ``"blocked: <reason>"``, ``"not available on
    <Weekday>"``, ``"outside declared hours"`` or ``"booked"``.
    """
    available: bool
    reason: Optional[str] = None
    rejection: Optional[RejectionKind] = None

    @classmethod
    def ok(cls) -> "AvailabilityResult":
        return cls(available=True)

    @classmethod
    def unavailable(
        cls, reason: str, kind: RejectionKind = RejectionKind.PROVIDER_UNAVAILABLE
    ) -> "AvailabilityResult":
        return cls(available=False, reason=reason, rejection=kind)


@dataclass(frozen=True)
class ReservationResult:
    """Outcome of a reservation attempt.

    On success ``booking`` holds the new pending booking, not yet persisted.
    """
    success: bool
    booking: Optional[Booking] = None
    rejection: Optional[RejectionKind] = None
    message: str = ""

    @classmethod
    def accepted(cls, booking: Booking) -> "ReservationResult":
        return cls(success=True, booking=booking, message="Booking request accepted.")

    @classmethod
    def rejected(cls, kind: RejectionKind, message: str) -> "ReservationResult":
        return cls(success=False, rejection=kind, message=message)
