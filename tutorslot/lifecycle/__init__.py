from tutorslot.lifecycle.state_machine import (
    Actor,
    BookingLifecycle,
    LifecycleTrigger,
    TransitionCause,
    TransitionResult,
    apply_transition,
)

__all__ = [
    "BookingLifecycle",
    "LifecycleTrigger",
    "TransitionCause",
    "TransitionResult",
    "Actor",
    "apply_transition",
]
