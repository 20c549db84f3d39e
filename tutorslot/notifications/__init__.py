from tutorslot.notifications.dispatcher import InMemoryOutbox, NotificationDispatcher
from tutorslot.notifications.messages import build_notification, render_message

__all__ = ["NotificationDispatcher", "InMemoryOutbox", "build_notification", "render_message"]
