from tutorslot.engine.availability import (
    compute_availability,
    filter_available_providers,
    would_double_book_requester,
)
from tutorslot.engine.expiry import expire_pending_bookings
from tutorslot.engine.intervals import conflicts
from tutorslot.engine.rejections import (
    AvailabilityResult,
    RejectionKind,
    ReservationResult,
    RuleResult,
)
from tutorslot.engine.reservation import reserve
from tutorslot.engine.rules import check_structure, min_bookable_date

__all__ = [
    "conflicts",
    "check_structure",
    "min_bookable_date",
    "compute_availability",
    "would_double_book_requester",
    "filter_available_providers",
    "reserve",
    "expire_pending_bookings",
    "RejectionKind",
    "RuleResult",
    "AvailabilityResult",
    "ReservationResult",
]
