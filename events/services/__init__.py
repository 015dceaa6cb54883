"""
Service layer for events. Views stay thin and call into these modules;
every mutation goes through events.locks.locked_event().
"""
from .attendance import mark_attendance
from .finalization import FinalizationResult, finalize
from .ledger import apply, approve, cancel, reject, remove
from .ratings import feedback_summary, rate_volunteer, submit_feedback
from .registry import (
    approve_event,
    complete_event,
    completed_events_for_volunteer,
    create_event,
    delete_event,
    events_for_organizer,
    events_for_volunteer,
    open_events,
    registrations_for_event,
    reject_event,
    update_event,
    visible_events,
)

__all__ = [
    "FinalizationResult",
    "apply",
    "approve",
    "approve_event",
    "cancel",
    "complete_event",
    "completed_events_for_volunteer",
    "create_event",
    "delete_event",
    "events_for_organizer",
    "events_for_volunteer",
    "feedback_summary",
    "finalize",
    "mark_attendance",
    "open_events",
    "rate_volunteer",
    "registrations_for_event",
    "reject",
    "reject_event",
    "remove",
    "submit_feedback",
    "update_event",
    "visible_events",
]
