"""Turn a classified status transition into a message for the affected user."""

from datetime import date, datetime
from typing import Optional

from tutorslot.config import settings
from tutorslot.lifecycle.state_machine import TransitionCause
from tutorslot.schemas.booking_schema import Booking
from tutorslot.schemas.notification_schema import Notification


def _format_day(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _format_time(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 or hours == 24 else "PM"
    return f"{(hours % 12) or 12}:{mins:02d} {suffix}"


def _session_label(booking: Booking) -> str:
    if booking.topic:
        return f"{booking.subject} - {booking.topic}"
    return booking.subject


def render_message(booking: Booking, cause: TransitionCause, reason: Optional[str] = None) -> str:
    label = _session_label(booking)

    if cause == TransitionCause.PROVIDER_CONFIRMED:
        return (
            f"Your appointment request for {label} on {_format_day(booking.date)} "
            f"at {_format_time(booking.interval.start)} has been confirmed."
        )
    if cause == TransitionCause.PROVIDER_DECLINED:
        message = f"Your appointment request for {label} has been declined."
        if reason:
            message += f" Reason: {reason}"
        return message
    if cause == TransitionCause.AUTO_DECLINED:
        hours = settings.policy.pending_expiry_hours
        return (
            f"Your appointment request for {label} has been automatically declined "
            f"as it was not confirmed within {hours} hours."
        )
    if cause == TransitionCause.PROVIDER_CANCELLED:
        return f"Your appointment for {label} has been cancelled."
    if cause == TransitionCause.BLACKOUT_CANCELLED:
        message = (
            f"Your appointment for {label} on {_format_day(booking.date)} has been "
            f"cancelled because your tutor is unavailable that day."
        )
        if reason:
            message += f" Reason: {reason}"
        return message
    if cause == TransitionCause.SESSION_STARTED:
        return f"Your session for {label} has started."
    if cause == TransitionCause.FEEDBACK_REQUESTED:
        return f"Your session for {label} has ended. Please share your feedback."
    if cause == TransitionCause.SESSION_COMPLETED:
        return f"Your session for {label} has been completed."
    if cause == TransitionCause.FEEDBACK_SUBMITTED:
        return f"Feedback was submitted for your session on {label}."
    raise ValueError(f"No message for cause {cause!r}")


def recipient_for(booking: Booking, cause: TransitionCause) -> str:
    """Feedback goes to the tutor; everything else to the tutee."""
    if cause == TransitionCause.FEEDBACK_SUBMITTED:
        return booking.provider_id
    return booking.requester_id


def build_notification(
    booking: Booking,
    cause: TransitionCause,
    reason: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Notification:
    return Notification(
        user_id=recipient_for(booking, cause),
        booking_id=booking.id,
        content=render_message(booking, cause, reason),
        cause=cause.value,
        created_at=created_at,
    )
