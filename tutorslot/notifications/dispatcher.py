"""Notification dispatch boundary and an in-memory outbox."""

import logging
from typing import Protocol

from tutorslot.schemas.notification_schema import Notification, NotificationStatus

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    """Anything that can enqueue a notification for delivery."""

    def dispatch(self, notification: Notification) -> None:
        ...


class InMemoryOutbox:
    """Collects notifications instead of delivering them.

    At most one notification is kept per user, booking and cause, so the
    same transition reported twice does not notify twice. Different
    bookings always notify, even when their text is identical.
    """

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def dispatch(self, notification: Notification) -> None:
        key = (notification.user_id, notification.booking_id, notification.cause)
        if any((n.user_id, n.booking_id, n.cause) == key for n in self.sent):
            logger.debug("Skipping duplicate notification for %s on %s",
                         notification.user_id, notification.booking_id)
            return
        self.sent.append(notification)
        logger.info("Notification queued for %s (%s)", notification.user_id, notification.cause)

    def for_user(self, user_id: str) -> list[Notification]:
        return [n for n in self.sent if n.user_id == user_id]

    def mark_read(self, user_id: str) -> int:
        count = 0
        for n in self.sent:
            if n.user_id == user_id and n.status == NotificationStatus.UNREAD:
                n.status = NotificationStatus.READ
                count += 1
        return count

    def reset(self) -> None:
        self.sent.clear()
