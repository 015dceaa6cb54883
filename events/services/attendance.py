# events/services/attendance.py
import logging

from core.exceptions import AlreadyFinalized, InvalidState, NotFound, ValidationError
from notifications.dispatcher import publish_many
from notifications.models import Notification

from ..datetime_utils import now
from ..locks import locked_event
from ..models import Event, EventRegistration
from ..permissions import require_manager
from ..sanitizers import validate_work_duration

logger = logging.getLogger("volunlink.events")


def mark_attendance(actor, event_id, volunteer_id, present, work_duration=None) -> EventRegistration:
    """
    Record whether an approved volunteer attended a completed event.
    Overwrites freely until the event's attendance is locked.
    """
    if not isinstance(present, bool):
        raise ValidationError("present must be true or false")

    duration = validate_work_duration(work_duration) if present else ""
    if present and not duration:
        raise ValidationError("Work duration is required when marking a volunteer present")

    with locked_event(event_id) as event:
        require_manager(actor, event)

        if event.status != Event.STATUS_COMPLETED:
            raise InvalidState("Attendance can only be marked after the event is completed")
        if event.attendance_locked:
            raise AlreadyFinalized("Attendance is locked for this event")

        try:
            registration = event.registrations.select_for_update().get(volunteer_id=volunteer_id)
        except (EventRegistration.DoesNotExist, TypeError, ValueError):
            raise NotFound("Registration not found")

        if registration.status != EventRegistration.STATUS_APPROVED:
            raise InvalidState("Attendance can only be marked for approved volunteers")
        if registration.hours_credited:
            raise InvalidState("Hours were already credited for this volunteer")

        registration.present = present
        registration.attendance_marked_at = now() if present else None
        registration.work_duration = duration
        registration.save(update_fields=["present", "attendance_marked_at", "work_duration", "updated_at"])

    logger.info(
        f"Attendance marked: event={event.id}, volunteer={registration.volunteer_id}, "
        f"present={present}, duration={duration!r}, actor={actor.id}"
    )

    status = "present" if present else "absent"
    message = f"You were marked {status} for \"{event.title}\"."
    if present:
        message = f"{message} Work duration: {duration}."
    publish_many([registration.volunteer_id, event.organizer_id], Notification.TOPIC_ATTENDANCE_UPDATED, {
        "event_id": event.id,
        "volunteer_id": registration.volunteer_id,
        "status": status,
        "present": present,
        "work_duration": duration,
        "event_title": event.title,
        "message": message,
    })
    return registration
