from tutorslot.schemas.booking_schema import (
    ACTIVE_STATUSES,
    FINISHED_STATUSES,
    TERMINAL_STATUSES,
    Booking,
    BookingRequest,
    BookingStatus,
    SessionMode,
)
from tutorslot.schemas.notification_schema import Notification, NotificationStatus
from tutorslot.schemas.schedule_schema import (
    BlackoutDate,
    BusinessHoursPolicy,
    ProviderCalendar,
    TimeInterval,
    WeeklySchedule,
)

__all__ = [
    "TimeInterval", "BusinessHoursPolicy", "WeeklySchedule", "BlackoutDate",
    "ProviderCalendar", "Booking", "BookingRequest", "BookingStatus", "SessionMode",
    "ACTIVE_STATUSES", "TERMINAL_STATUSES", "FINISHED_STATUSES",
    "Notification", "NotificationStatus",
]
