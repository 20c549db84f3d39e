from tutorslot.store.base import BookingStore
from tutorslot.store.memory import InMemoryBookingStore

__all__ = ["BookingStore", "InMemoryBookingStore"]
