# events/services/ledger.py
"""
Registration ledger: apply, approve, reject, cancel and remove.

Each operation validates and mutates under locked_event() and publishes
registrationUpdated to the volunteer and the organizer once the
transaction has committed.
"""
import logging

from django.conf import settings

from core.exceptions import CapacityExceeded, InvalidState, NotFound
from notifications.dispatcher import publish_many
from notifications.models import Notification

from .. import state_machine
from ..datetime_utils import has_passed, is_registration_open, now
from ..locks import locked_event
from ..models import Event, EventRegistration
from ..permissions import require_manager, require_volunteer
from ..sanitizers import (
    validate_applicant,
    validate_cancellation_reason,
    validate_rejection_reason,
)

logger = logging.getLogger("volunlink.events")

REMOVED = "removed"
REMOVED_REASON = "Removed by organizer"


def _notify(event, volunteer_id, status, source, message):
    publish_many([volunteer_id, event.organizer_id], Notification.TOPIC_REGISTRATION_UPDATED, {
        "event_id": event.id,
        "volunteer_id": volunteer_id,
        "status": status,
        "source": source,
        "label": state_machine.TRANSITION_LABELS.get(status, status),
        "event_title": event.title,
        "message": message,
    })


def _get_registration(event, volunteer_id) -> EventRegistration:
    try:
        return event.registrations.select_for_update().get(volunteer_id=volunteer_id)
    except (EventRegistration.DoesNotExist, TypeError, ValueError):
        raise NotFound("Registration not found")


def _uncount(event, registration):
    """Drop the volunteer from total_registrations if currently counted."""
    if registration.counted_in_total:
        registration.counted_in_total = False
        event.total_registrations = max(0, event.total_registrations - 1)
        event.save(update_fields=["total_registrations", "updated_at"])


def _ensure_open(event):
    if is_registration_open(event):
        return
    if not event.approved:
        raise InvalidState("This event is not open for applications yet")
    if event.status != Event.STATUS_UPCOMING:
        raise InvalidState("Applications are closed for this event")
    if has_passed(event.date):
        raise InvalidState("This event has already taken place")
    if has_passed(event.registration_deadline):
        raise InvalidState("The registration deadline has passed")


def apply(volunteer, event_id, applicant) -> EventRegistration:
    require_volunteer(volunteer)
    snapshot = validate_applicant(applicant)

    with locked_event(event_id) as event:
        _ensure_open(event)

        registration = (
            event.registrations.select_for_update().filter(volunteer=volunteer).first()
        )
        if registration is None:
            registration = EventRegistration.objects.create(
                event=event,
                volunteer=volunteer,
                status=EventRegistration.STATUS_PENDING,
                **snapshot,
            )
            logger.info(f"Application submitted: event={event.id}, volunteer={volunteer.id}")
        else:
            state_machine.ensure_transition(registration, EventRegistration.STATUS_PENDING, actor=volunteer)

            max_reapplies = settings.REGISTRATION_MAX_REAPPLIES
            if max_reapplies is not None and registration.reapply_count >= max_reapplies:
                raise InvalidState("You have reached the maximum number of reapplications for this event")

            state_machine.transition(registration, EventRegistration.STATUS_PENDING, actor=volunteer)
            for field, value in snapshot.items():
                setattr(registration, field, value)
            registration.created_at = now()
            registration.reviewed_at = None
            registration.rejection_reason = ""
            registration.cancellation_reason = ""
            registration.present = False
            registration.attendance_marked_at = None
            registration.work_duration = ""
            registration.reapply_count += 1
            registration.save()

    _notify(
        event, volunteer.id, registration.status, "volunteer",
        f"{registration.name} applied to volunteer at \"{event.title}\".",
    )
    return registration


def approve(actor, event_id, volunteer_id) -> EventRegistration:
    with locked_event(event_id) as event:
        require_manager(actor, event)
        registration = _get_registration(event, volunteer_id)
        state_machine.ensure_transition(registration, EventRegistration.STATUS_APPROVED, actor=actor)

        # Counted inside the critical section so concurrent approvals queue here
        if event.approved_count() >= event.max_volunteers:
            logger.warning(
                f"Approval refused, event full: event={event.id}, volunteer={volunteer_id}, "
                f"capacity={event.max_volunteers}"
            )
            raise CapacityExceeded("Event is full. No more volunteers can be approved.")

        state_machine.transition(registration, EventRegistration.STATUS_APPROVED, actor=actor)
        registration.reviewed_at = now()
        registration.rejection_reason = ""
        if not registration.counted_in_total:
            registration.counted_in_total = True
            event.total_registrations += 1
            event.save(update_fields=["total_registrations", "updated_at"])
        registration.save()

    _notify(
        event, registration.volunteer_id, registration.status, "organizer",
        f"Your application for \"{event.title}\" was approved.",
    )
    return registration


def reject(actor, event_id, volunteer_id, reason=None) -> EventRegistration:
    reason = validate_rejection_reason(reason)

    with locked_event(event_id) as event:
        require_manager(actor, event)
        registration = _get_registration(event, volunteer_id)
        if registration.hours_credited_at:
            raise InvalidState("Hours were already credited for this registration")
        state_machine.transition(registration, EventRegistration.STATUS_REJECTED, actor=actor)

        _uncount(event, registration)
        registration.rejection_reason = reason
        registration.reviewed_at = now()
        # a rejected volunteer no longer counts as attending
        registration.present = False
        registration.attendance_marked_at = None
        registration.work_duration = ""
        registration.save()

    message = f"Your application for \"{event.title}\" was not accepted."
    if reason:
        message = f"{message} Reason: {reason}"
    _notify(event, registration.volunteer_id, registration.status, "organizer", message)
    return registration


def cancel(volunteer, event_id, reason) -> EventRegistration:
    reason = validate_cancellation_reason(reason)

    with locked_event(event_id) as event:
        try:
            registration = event.registrations.select_for_update().get(volunteer=volunteer)
        except EventRegistration.DoesNotExist:
            raise NotFound("You have not applied to this event")

        state_machine.ensure_transition(registration, EventRegistration.STATUS_CANCELLED, actor=volunteer)
        if event.status == Event.STATUS_COMPLETED:
            raise InvalidState("Completed events cannot be cancelled")
        if registration.certificate_generated:
            raise InvalidState("A certificate was already issued for this registration")

        state_machine.transition(registration, EventRegistration.STATUS_CANCELLED, actor=volunteer)
        _uncount(event, registration)
        registration.cancellation_reason = reason
        registration.save()

    _notify(
        event, volunteer.id, registration.status, "volunteer",
        f"{registration.name} cancelled their registration for \"{event.title}\". Reason: {reason}",
    )
    return registration


def remove(actor, event_id, volunteer_id):
    """
    Approved volunteers are rejected with a fixed reason; any other
    entry is deleted outright. Returns the resulting status.
    """
    with locked_event(event_id) as event:
        require_manager(actor, event)
        registration = _get_registration(event, volunteer_id)

        if event.status == Event.STATUS_COMPLETED:
            raise InvalidState("Volunteers cannot be removed from a completed event")
        if registration.certificate_generated:
            raise InvalidState("A certificate was already issued for this registration")

        if registration.status == EventRegistration.STATUS_APPROVED:
            state_machine.transition(registration, EventRegistration.STATUS_REJECTED, actor=actor)
            _uncount(event, registration)
            registration.rejection_reason = REMOVED_REASON
            registration.reviewed_at = now()
            registration.save()
            status = registration.status
        else:
            _uncount(event, registration)
            registration.delete()
            status = REMOVED
            logger.info(
                f"Registration removed: event={event.id}, volunteer={volunteer_id}, actor={actor.id}"
            )

    _notify(
        event, int(volunteer_id), status, "organizer",
        f"You were removed from \"{event.title}\".",
    )
    return status

