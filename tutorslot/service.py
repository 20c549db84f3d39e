"""
Booking service: the caller side of the engine.

Loads snapshots from the store, runs the pure engine, commits through the
store's conflict-checked writes and queues notifications. Requester and
provider ids are always passed in explicitly; nothing is read from an
ambient session.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional

from tutorslot.clock import Clock, system_clock
from tutorslot.engine.availability import (
    compute_availability,
    filter_available_providers,
    would_double_book_requester,
)
from tutorslot.engine.expiry import expire_pending_bookings
from tutorslot.engine.rejections import AvailabilityResult, RejectionKind, ReservationResult
from tutorslot.engine.reservation import reserve
from tutorslot.engine.rules import check_structure
from tutorslot.errors import (
    BookingConflictError,
    BookingNotFoundError,
    NotOwnerError,
    RequesterConflictError,
)
from tutorslot.lifecycle.state_machine import (
    Actor,
    LifecycleTrigger,
    TransitionResult,
    apply_transition,
    find_transition,
)
from tutorslot.logging_context import get_request_logger, new_request_id
from tutorslot.notifications.dispatcher import InMemoryOutbox, NotificationDispatcher
from tutorslot.notifications.messages import build_notification
from tutorslot.schemas.booking_schema import (
    TERMINAL_STATUSES,
    Booking,
    BookingRequest,
    BookingStatus,
)
from tutorslot.schemas.schedule_schema import (
    BlackoutDate,
    BusinessHoursPolicy,
    TimeInterval,
)
from tutorslot.store.base import BookingStore

logger = get_request_logger(__name__)


def _merge(*groups: Iterable[Booking]) -> list[Booking]:
    merged: dict[str, Booking] = {}
    for group in groups:
        for booking in group:
            merged[booking.id] = booking
    return list(merged.values())


class BookingService:
    """Coordinates booking requests, status changes and expiry sweeps."""

    def __init__(
        self,
        store: BookingStore,
        clock: Clock = system_clock,
        dispatcher: Optional[NotificationDispatcher] = None,
        policy: Optional[BusinessHoursPolicy] = None,
        lead_days: Optional[int] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.dispatcher = dispatcher if dispatcher is not None else InMemoryOutbox()
        self.policy = policy or BusinessHoursPolicy.from_settings()
        self.lead_days = lead_days

    # --- Provider calendar ---

    def declare_slot(self, provider_id: str, actor_id: str, weekday: str, interval: TimeInterval) -> bool:
        calendar = self.store.get_calendar(provider_id)
        added = calendar.add_slot(actor_id, weekday, interval, self.policy)
        if added:
            self.store.save_calendar(calendar)
        return added

    def remove_slot(self, provider_id: str, actor_id: str, weekday: str, interval: TimeInterval) -> bool:
        calendar = self.store.get_calendar(provider_id)
        removed = calendar.remove_slot(actor_id, weekday, interval)
        if removed:
            self.store.save_calendar(calendar)
        return removed

    def add_blackout(self, provider_id: str, actor_id: str, day: date, reason: str) -> list[str]:
        """Black out a date and cancel the provider's confirmed sessions on it.

        Returns the ids of the cancelled bookings.
        """
        new_request_id("BLK")
        calendar = self.store.get_calendar(provider_id)
        blackout = calendar.add_blackout(actor_id, day, reason)
        self.store.save_calendar(calendar)

        cancelled = []
        for booking in self.store.active_for_provider(provider_id, day):
            if booking.status != BookingStatus.CONFIRMED:
                continue
            result = self._commit(booking, LifecycleTrigger.BLACKOUT_ADDED, blackout.reason)
            if result.success:
                cancelled.append(booking.id)
        logger.info("Blackout %s for %s cancelled %d session(s)", day, provider_id, len(cancelled))
        return cancelled

    def remove_blackout(self, provider_id: str, actor_id: str, day: date) -> bool:
        calendar = self.store.get_calendar(provider_id)
        removed = calendar.remove_blackout(actor_id, day)
        if removed:
            self.store.save_calendar(calendar)
        return removed

    def blackouts(self, provider_id: str) -> list[BlackoutDate]:
        return list(self.store.get_calendar(provider_id).blackouts)

    # --- Availability queries ---

    def check_availability(self, provider_id: str, day: date, interval: TimeInterval) -> AvailabilityResult:
        calendar = self.store.get_calendar(provider_id)
        return compute_availability(
            calendar, day, interval, self.store.active_for_provider(provider_id, day)
        )

    def available_providers(
        self, provider_ids: Iterable[str], day: date, interval: TimeInterval
    ) -> list[str]:
        ids = list(provider_ids)
        calendars = [self.store.get_calendar(pid) for pid in ids]
        bookings = _merge(*(self.store.active_for_provider(pid, day) for pid in ids))
        return filter_available_providers(calendars, day, interval, bookings)

    # --- Requests ---

    def request_booking(self, request: BookingRequest) -> ReservationResult:
        """Validate a request and commit it as a pending booking.

        A storage conflict at commit time means a concurrent writer won the
        slot; it comes back as ALREADY_BOOKED and the caller should re-run
        availability on fresh data.
        """
        new_request_id()
        calendar = self.store.get_calendar(request.provider_id)
        snapshot = _merge(
            self.store.active_for_provider(request.provider_id, request.date),
            self.store.active_for_requester(request.requester_id, request.date),
        )
        result = reserve(request, calendar, snapshot, self.clock(), self.policy, self.lead_days)
        if not result.success:
            return result

        try:
            self.store.insert(result.booking)
        except RequesterConflictError as exc:
            logger.warning("Requester %s double-booked at commit: %s", request.requester_id, exc)
            return ReservationResult.rejected(
                RejectionKind.REQUESTER_DOUBLE_BOOKED,
                "You already have a session that overlaps this time.",
            )
        except BookingConflictError as exc:
            logger.warning("Lost commit race for %s: %s", request.provider_id, exc)
            return ReservationResult.rejected(
                RejectionKind.ALREADY_BOOKED,
                "This time slot was just booked by someone else. Please pick another time.",
            )
        return result

    def reschedule(
        self, booking_id: str, actor_id: str, day: date, interval: TimeInterval
    ) -> ReservationResult:
        """Move a pending request to a new date/time, ignoring its own old slot."""
        new_request_id()
        booking = self._get(booking_id)
        if actor_id != booking.requester_id:
            raise NotOwnerError(f"User {actor_id} cannot reschedule booking {booking_id}")
        if booking.status != BookingStatus.PENDING:
            return ReservationResult.rejected(
                RejectionKind.ALREADY_TERMINAL if booking.status in TERMINAL_STATUSES
                else RejectionKind.INVALID_TRANSITION,
                f"Only pending requests can be rescheduled; booking is {booking.status.value}.",
            )

        structural = check_structure(day, interval, self.clock(), self.policy, self.lead_days)
        if not structural.passed:
            return ReservationResult.rejected(structural.rejection, structural.message)

        calendar = self.store.get_calendar(booking.provider_id)
        snapshot = _merge(
            self.store.active_for_provider(booking.provider_id, day),
            self.store.active_for_requester(booking.requester_id, day),
        )
        availability = compute_availability(calendar, day, interval, snapshot, exclude_booking_id=booking.id)
        if not availability.available:
            return ReservationResult.rejected(
                availability.rejection, f"Tutor is unavailable: {availability.reason}."
            )
        if would_double_book_requester(booking.requester_id, day, interval, snapshot, booking.id):
            return ReservationResult.rejected(
                RejectionKind.REQUESTER_DOUBLE_BOOKED,
                "You already have a session that overlaps this time.",
            )

        moved = booking.model_copy(update={"date": day, "interval": interval})
        if not self.store.compare_and_set_status(booking.id, BookingStatus.PENDING, moved):
            return ReservationResult.rejected(
                RejectionKind.INVALID_TRANSITION,
                "Booking changed while rescheduling; please refresh.",
            )
        logger.info("Booking %s rescheduled to %s %s", booking.id, day, interval)
        return ReservationResult(success=True, booking=moved, message="Booking rescheduled.")

    # --- Lifecycle ---

    def transition(
        self,
        booking_id: str,
        trigger: LifecycleTrigger,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        """Apply a user-driven trigger (confirm, decline, start, ...) to a booking.

        Raises:
            BookingNotFoundError: unknown booking id.
            NotOwnerError: ``actor_id`` is not the party allowed to fire ``trigger``.
        """
        new_request_id("TRX")
        booking = self._get(booking_id)
        t = find_transition(booking.status, trigger)
        if t is not None:
            self._authorize(booking, t.actor, actor_id, trigger)
        return self._commit(booking, trigger, reason)

    def sweep_expired(self) -> list[str]:
        """Auto-decline pending requests older than the dwell time.

        Returns ids actually declined. A booking confirmed between the scan
        and the update is left alone by the compare-and-set.
        """
        new_request_id("SWP")
        now = self.clock()
        declined = []
        for booking_id in expire_pending_bookings(self.store.pending_bookings(), now):
            booking = self.store.get_booking(booking_id)
            if booking is None or booking.status != BookingStatus.PENDING:
                continue
            result = self._commit(booking, LifecycleTrigger.TIMEOUT)
            if result.success:
                declined.append(booking_id)
        logger.info("Expiry sweep declined %d booking(s)", len(declined))
        return declined

    # --- Internals ---

    def _get(self, booking_id: str) -> Booking:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found.")
        return booking

    @staticmethod
    def _authorize(booking: Booking, actor: Actor, actor_id: str, trigger: LifecycleTrigger) -> None:
        if actor == Actor.PROVIDER and actor_id == booking.provider_id:
            return
        if actor == Actor.REQUESTER and actor_id == booking.requester_id:
            return
        raise NotOwnerError(
            f"User {actor_id} cannot {trigger.value} booking {booking.id}"
        )

    def _commit(
        self,
        booking: Booking,
        trigger: LifecycleTrigger,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        result = apply_transition(booking, trigger, reason)
        if not result.success:
            logger.info("Transition refused for %s: %s", booking.id, result.message)
            return result

        try:
            stored = self.store.compare_and_set_status(booking.id, result.from_status, result.booking)
        except RequesterConflictError as exc:
            logger.warning("Confirm of %s would double-book the requester: %s", booking.id, exc)
            return TransitionResult(
                success=False,
                booking=booking,
                from_status=booking.status,
                rejection=RejectionKind.REQUESTER_DOUBLE_BOOKED,
                message="The student already has a confirmed session that overlaps this time.",
            )
        except BookingConflictError as exc:
            logger.warning("Confirm of %s lost to an overlapping session: %s", booking.id, exc)
            return TransitionResult(
                success=False,
                booking=booking,
                from_status=booking.status,
                rejection=RejectionKind.ALREADY_BOOKED,
                message="This time slot is already taken by another confirmed session.",
            )

        if not stored:
            fresh = self._get(booking.id)
            terminal = fresh.status in TERMINAL_STATUSES
            return TransitionResult(
                success=False,
                booking=fresh,
                from_status=fresh.status,
                rejection=RejectionKind.ALREADY_TERMINAL if terminal else RejectionKind.INVALID_TRANSITION,
                message=f"Booking {booking.id} changed concurrently and is now {fresh.status.value}.",
            )

        self.dispatcher.dispatch(
            build_notification(result.booking, result.cause, reason, created_at=self.clock())
        )
        return result
