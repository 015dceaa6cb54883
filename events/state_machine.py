# events/state_machine.py
"""
Registration state machine.

Enforces valid transitions for a volunteer's registration on an event:
pending → approved | rejected | cancelled
approved → rejected | cancelled
rejected → approved | pending   (organizer re-approves, volunteer reapplies)
cancelled → pending             (volunteer reapplies)

Any transition not in VALID_TRANSITIONS is rejected with a specific reason.
"""
from typing import Tuple
import logging

from core.exceptions import Conflict, InvalidState

from .models import EventRegistration

logger = logging.getLogger("volunlink.events")

PENDING = EventRegistration.STATUS_PENDING
APPROVED = EventRegistration.STATUS_APPROVED
REJECTED = EventRegistration.STATUS_REJECTED
CANCELLED = EventRegistration.STATUS_CANCELLED


# Valid state transitions: from_status -> list of allowed to_statuses
VALID_TRANSITIONS = {
    PENDING: [APPROVED, REJECTED, CANCELLED],
    APPROVED: [REJECTED, CANCELLED],
    REJECTED: [APPROVED, PENDING],
    CANCELLED: [PENDING],
}

# Human reasons for the disallowed pairs the API surfaces
_REFUSALS = {
    (APPROVED, APPROVED): (InvalidState, "Registration is already approved"),
    (CANCELLED, APPROVED): (InvalidState, "Cancelled registrations cannot be approved"),
    (REJECTED, REJECTED): (InvalidState, "Registration is already rejected"),
    (CANCELLED, REJECTED): (InvalidState, "Cancelled registrations cannot be rejected"),
    (CANCELLED, CANCELLED): (InvalidState, "This registration is already cancelled"),
    (REJECTED, CANCELLED): (InvalidState, "Rejected registrations cannot be cancelled"),
    (PENDING, PENDING): (Conflict, "Your application is already pending organizer approval"),
    (APPROVED, PENDING): (Conflict, "You are already approved for this event"),
}

# Labels carried in registrationUpdated payloads
TRANSITION_LABELS = {
    PENDING: "Application submitted",
    APPROVED: "Registration approved",
    REJECTED: "Registration rejected",
    CANCELLED: "Registration cancelled",
    "removed": "Removed from event",
}


def can_transition(registration: EventRegistration, new_status: str) -> Tuple[bool, str]:
    """
    Check if a registration can move to a new status.

    Returns (can_transition: bool, reason: str)
    """
    current_status = registration.status

    if new_status not in dict(EventRegistration.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    if new_status in VALID_TRANSITIONS.get(current_status, []):
        return True, ""

    refusal = _REFUSALS.get((current_status, new_status))
    if refusal:
        return False, refusal[1]

    return False, f"Cannot transition from '{current_status}' to '{new_status}'"


def ensure_transition(registration: EventRegistration, new_status: str, actor=None):
    """
    Raise the matching service error if the transition is not allowed.
    Conflict for duplicate applications, InvalidState for everything else.
    """
    can, reason = can_transition(registration, new_status)
    if can:
        return

    logger.warning(
        f"Invalid registration transition attempted: registration={registration.id}, "
        f"from={registration.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
        f"Reason: {reason}"
    )
    exc_class = _REFUSALS.get((registration.status, new_status), (InvalidState,))[0]
    raise exc_class(reason)


def transition(registration: EventRegistration, new_status: str, actor=None) -> str:
    """
    Move the registration to new_status in memory and return the old status.
    The caller saves inside its own transaction.
    """
    ensure_transition(registration, new_status, actor=actor)

    old_status = registration.status
    registration.status = new_status

    logger.info(
        f"Registration transition: registration={registration.id}, event={registration.event_id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )
    return old_status


def get_allowed_transitions(registration: EventRegistration) -> list:
    return VALID_TRANSITIONS.get(registration.status, [])
