# events/services/registry.py
"""
Event registry: creation, edits, admin approval and rejection,
completion, soft delete, and the read-side lookups built on
registrations.
"""
import logging

from django.conf import settings
from django.db.models import Prefetch, Q
from django.utils.dateparse import parse_date

from core.exceptions import InvalidState, ValidationError
from notifications.dispatcher import publish, publish_many
from notifications.models import Notification

from ..datetime_utils import has_passed, now
from ..locks import get_active_event, locked_event
from ..models import Event, EventRegistration
from ..permissions import (
    require_admin,
    require_manager,
    require_organizer,
    user_is_organizer,
    user_is_platform_admin,
)
from ..sanitizers import sanitize_text, sanitize_title, validate_capacity, validate_rejection_reason

logger = logging.getLogger("volunlink.events")

SCHEDULE_FIELDS = ("date", "start_time", "end_time", "registration_deadline")
# status values an edit may set; completion has its own operation
EDITABLE_STATUSES = (Event.STATUS_UPCOMING, Event.STATUS_CANCELLED)


def _validate_schedule(date, start_time, end_time, deadline):
    if date is None:
        raise ValidationError("Date is required")
    if deadline is not None and deadline >= date:
        raise ValidationError("Registration deadline must be before the event date")
    if start_time and end_time and end_time <= start_time:
        raise ValidationError("End time must be after start time")


def _clean_title(value) -> str:
    title = sanitize_title(value)
    if not title:
        raise ValidationError("Title is required")
    return title


def create_event(organizer, data) -> Event:
    require_organizer(organizer)

    title = _clean_title(data.get("title"))
    max_volunteers = validate_capacity(data.get("max_volunteers"))

    date = data.get("date")
    start_time = data.get("start_time")
    end_time = data.get("end_time")
    deadline = data.get("registration_deadline")
    _validate_schedule(date, start_time, end_time, deadline)
    if has_passed(date):
        raise ValidationError("Event date must be in the future")

    event = Event.objects.create(
        organizer=organizer,
        title=title,
        description=sanitize_text(data.get("description"), max_length=10000),
        location=sanitize_text(data.get("location"), max_length=255),
        date=date,
        start_time=start_time,
        end_time=end_time,
        registration_deadline=deadline,
        max_volunteers=max_volunteers,
        approved=settings.EVENT_AUTO_APPROVE,
    )
    logger.info(f"Event created: event={event.id}, organizer={organizer.id}, approved={event.approved}")
    return event


def update_event(actor, event_id, data) -> Event:
    """
    Partial edit by the organizer or an admin; only keys present in
    `data` are touched. Capacity may not drop below the volunteers
    already approved. Approved volunteers are told which fields changed.
    """
    with locked_event(event_id) as event:
        require_manager(actor, event)
        if event.status == Event.STATUS_COMPLETED:
            raise InvalidState("Completed events cannot be edited")

        changes = {}
        if "title" in data:
            changes["title"] = _clean_title(data["title"])
        if "description" in data:
            changes["description"] = sanitize_text(data["description"], max_length=10000)
        if "location" in data:
            changes["location"] = sanitize_text(data["location"], max_length=255)

        if "max_volunteers" in data:
            capacity = validate_capacity(data["max_volunteers"])
            approved = event.approved_count()
            if capacity < approved:
                raise ValidationError(
                    f"max_volunteers cannot be lower than the {approved} volunteers already approved"
                )
            changes["max_volunteers"] = capacity

        if "status" in data:
            if data["status"] not in EDITABLE_STATUSES:
                raise ValidationError("Status can only be set to upcoming or cancelled")
            changes["status"] = data["status"]

        for field in SCHEDULE_FIELDS:
            if field in data:
                changes[field] = data[field]
        if any(field in changes for field in SCHEDULE_FIELDS):
            _validate_schedule(*(changes.get(f, getattr(event, f)) for f in SCHEDULE_FIELDS))
            if "date" in changes and has_passed(changes["date"]):
                raise ValidationError("Event date must be in the future")

        changed = [field for field, value in changes.items() if getattr(event, field) != value]
        if not changed:
            return event

        for field in changed:
            setattr(event, field, changes[field])
        event.save(update_fields=[*changed, "updated_at"])
        recipients = sorted(event.approved_volunteer_ids)

    logger.info(f"Event updated: event={event.id}, actor={actor.id}, fields={changed}")
    publish_many(recipients, Notification.TOPIC_EVENT_UPDATED, {
        "event_id": event.id,
        "event_title": event.title,
        "changes": changed,
        "status": event.status,
        "message": f"\"{event.title}\" has been updated. Please check the details.",
    })
    return event


def approve_event(actor, event_id) -> Event:
    require_admin(actor)
    with locked_event(event_id) as event:
        if not event.approved:
            event.approved = True
            event.save(update_fields=["approved", "updated_at"])
            logger.info(f"Event approved: event={event.id}, actor={actor.id}")
    return event


def reject_event(actor, event_id, reason=None) -> Event:
    """
    Admin turns an event down: it is withdrawn from approval and soft
    deleted. The organizer gets the reason; approved volunteers are told
    the event is gone.
    """
    require_admin(actor)
    reason = validate_rejection_reason(reason)

    with locked_event(event_id) as event:
        if event.status == Event.STATUS_COMPLETED:
            raise InvalidState("Completed events cannot be rejected")
        volunteers = sorted(event.approved_volunteer_ids)
        event.approved = False
        event.is_deleted = True
        event.save(update_fields=["approved", "is_deleted", "updated_at"])

    logger.info(f"Event rejected: event={event.id}, actor={actor.id}")
    message = f"Your event \"{event.title}\" was not approved."
    if reason:
        message = f"{message} Reason: {reason}"
    publish(event.organizer_id, Notification.TOPIC_EVENT_REJECTED, {
        "event_id": event.id,
        "event_title": event.title,
        "reason": reason,
        "message": message,
    })
    publish_many(volunteers, Notification.TOPIC_EVENT_DELETED, {
        "event_id": event.id,
        "event_title": event.title,
        "message": f"\"{event.title}\" has been withdrawn.",
    })
    return event


def _participant_ids(event):
    return [event.organizer_id, *sorted(event.approved_volunteer_ids)]


def complete_event(actor, event_id) -> Event:
    with locked_event(event_id) as event:
        require_manager(actor, event)
        if event.status == Event.STATUS_COMPLETED:
            raise InvalidState("Event is already completed")
        if event.status == Event.STATUS_CANCELLED:
            raise InvalidState("Cancelled events cannot be completed")

        event.status = Event.STATUS_COMPLETED
        event.save(update_fields=["status", "updated_at"])
        recipients = _participant_ids(event)

    logger.info(f"Event completed: event={event.id}, actor={actor.id}")
    publish_many(recipients, Notification.TOPIC_EVENT_COMPLETED, {
        "event_id": event.id,
        "event_title": event.title,
        "status": event.status,
        "message": f"\"{event.title}\" has been marked as completed.",
    })
    return event


def delete_event(actor, event_id) -> Event:
    """Soft delete; the event then behaves as missing everywhere."""
    with locked_event(event_id) as event:
        require_manager(actor, event)
        recipients = _participant_ids(event)
        event.is_deleted = True
        event.save(update_fields=["is_deleted", "updated_at"])

    logger.info(f"Event soft-deleted: event={event.id}, actor={actor.id}")
    publish_many(recipients, Notification.TOPIC_EVENT_DELETED, {
        "event_id": event.id,
        "event_title": event.title,
        "message": f"\"{event.title}\" was removed by its organizer.",
    })
    return event


# ─────────────────────────────────────────────────────────────
# Queries
# ─────────────────────────────────────────────────────────────

def _apply_filters(qs, filters):
    """
    Narrow an event listing by query parameters:
    location (substring), date (YYYY-MM-DD), status, organizer (id) and
    search (title or description).
    """
    location = (filters.get("location") or "").strip()
    if location:
        qs = qs.filter(location__icontains=location)

    day = filters.get("date")
    if day:
        parsed = parse_date(str(day))
        if parsed is None:
            raise ValidationError("date must be formatted as YYYY-MM-DD")
        qs = qs.filter(date__date=parsed)

    status = filters.get("status")
    if status:
        if status not in dict(Event.STATUS_CHOICES):
            raise ValidationError(f"Unknown status: {status}")
        qs = qs.filter(status=status)
        if status == Event.STATUS_UPCOMING:
            qs = qs.filter(date__gte=now())

    organizer = filters.get("organizer")
    if organizer:
        try:
            qs = qs.filter(organizer_id=int(organizer))
        except (TypeError, ValueError):
            raise ValidationError("organizer must be a user id")

    search = (filters.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

    return qs


def open_events(filters=None):
    qs = _apply_filters(Event.objects.open_for_applications(), filters or {})
    return qs.with_approved_total().order_by("date", "id")


def visible_events(user, filters=None):
    """
    The public listing as seen by `user`:
    - admins see every event, optionally narrowed by ?approved=true|false
    - organizers see approved events plus their own
    - everyone else sees open events only
    """
    filters = filters or {}
    if user_is_platform_admin(user):
        qs = Event.objects.active()
        approved = filters.get("approved")
        if approved:
            qs = qs.filter(approved=str(approved).lower() in ("1", "true", "yes"))
    elif user_is_organizer(user):
        qs = Event.objects.active().filter(Q(approved=True) | Q(organizer=user))
    else:
        return open_events(filters)

    qs = _apply_filters(qs, filters)
    return qs.with_approved_total().order_by("date", "id")


def events_for_organizer(organizer):
    return (
        Event.objects.active()
        .filter(organizer=organizer)
        .with_approved_total()
        .order_by("-date", "-id")
    )


def events_for_volunteer(volunteer):
    """
    Every non-deleted event the volunteer applied to, with their own
    registration prefetched as `my_registrations`.
    """
    own = EventRegistration.objects.filter(volunteer=volunteer)
    return (
        Event.objects.active()
        .filter(registrations__volunteer=volunteer)
        .prefetch_related(Prefetch("registrations", queryset=own, to_attr="my_registrations"))
        .with_approved_total()
        .order_by("-date", "-id")
        .distinct()
    )


def completed_events_for_volunteer(volunteer):
    """
    Completed events the volunteer attended, with their registration
    and certificate (if issued) prefetched.
    """
    from volunteers.models import Certificate

    own = EventRegistration.objects.filter(volunteer=volunteer)
    own_certs = Certificate.objects.filter(volunteer=volunteer)
    return (
        Event.objects.active()
        .filter(
            status=Event.STATUS_COMPLETED,
            registrations__volunteer=volunteer,
            registrations__status=EventRegistration.STATUS_APPROVED,
            registrations__present=True,
        )
        .prefetch_related(
            Prefetch("registrations", queryset=own, to_attr="my_registrations"),
            Prefetch("certificates", queryset=own_certs, to_attr="my_certificates"),
        )
        .with_approved_total()
        .order_by("-date", "-id")
        .distinct()
    )


def registrations_for_event(actor, event_id):
    event = get_active_event(event_id)
    require_manager(actor, event)
    return event, event.registrations.select_related("volunteer").order_by("created_at", "id")
