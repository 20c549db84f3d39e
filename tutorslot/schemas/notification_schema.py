"""Notification records produced for booking status changes."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


class Notification(BaseModel):
    """A human-readable message queued for one user."""

    user_id: str
    booking_id: str
    content: str
    cause: str
    status: NotificationStatus = NotificationStatus.UNREAD
    created_at: Optional[datetime] = None
