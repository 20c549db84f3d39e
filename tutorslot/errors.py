"""Exceptions for programming and boundary errors.

Booking rejections are never raised; they are returned as typed results
(see ``tutorslot.engine.rejections``). These exceptions cover misuse of
the API and storage-level failures.
"""


class NotOwnerError(PermissionError):
    """Raised when someone other than the owning provider edits a calendar,
    or the wrong party drives a booking transition."""


class BookingNotFoundError(LookupError):
    """Raised when a booking id is unknown to the store."""


class BookingConflictError(Exception):
    """Raised by a store when a commit would overlap an active booking.

    The service layer translates this into an ``ALREADY_BOOKED`` rejection.
    """

    def __init__(self, booking_id: str, conflicting_id: str) -> None:
        super().__init__(
            f"Booking {booking_id} overlaps active booking {conflicting_id}"
        )
        self.booking_id = booking_id
        self.conflicting_id = conflicting_id


class RequesterConflictError(BookingConflictError):
    """Raised when a commit would give the requester two overlapping active
    sessions, possibly with different providers."""
