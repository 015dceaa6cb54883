# events/services/ratings.py
import logging

from django.db.models import Avg, Count

from core.exceptions import AlreadySubmitted, InvalidState, NotFound
from notifications.dispatcher import publish
from notifications.models import Notification
from volunteers.store import VolunteerAggregateStore

from ..datetime_utils import now
from ..locks import get_active_event, locked_event
from ..models import Event, EventRegistration, VolunteerRatingLog
from ..permissions import require_manager, require_volunteer
from ..sanitizers import validate_feedback_text, validate_rating

logger = logging.getLogger("volunlink.events")


def rate_volunteer(actor, event_id, volunteer_id, rating) -> EventRegistration:
    """
    Organizer rates a volunteer who attended. Re-rating replaces the
    current value; every rating is kept in VolunteerRatingLog.
    """
    rating = validate_rating(rating)

    with locked_event(event_id) as event:
        require_manager(actor, event)
        if event.status != Event.STATUS_COMPLETED:
            raise InvalidState("Volunteers can only be rated after the event is completed")

        try:
            registration = event.registrations.select_for_update().get(volunteer_id=volunteer_id)
        except (EventRegistration.DoesNotExist, TypeError, ValueError):
            raise NotFound("Registration not found")

        if registration.status != EventRegistration.STATUS_APPROVED or not registration.present:
            raise InvalidState("Only approved volunteers marked present can be rated")

        previous = registration.organizer_rating
        registration.organizer_rating = rating
        registration.save(update_fields=["organizer_rating", "updated_at"])
        VolunteerRatingLog.objects.create(
            registration=registration,
            rated_by=actor,
            previous_rating=previous,
            rating=rating,
        )
        VolunteerAggregateStore.update_certificate_rating(event.id, registration.volunteer_id, rating)

    logger.info(
        f"Volunteer rated: event={event.id}, volunteer={registration.volunteer_id}, "
        f"rating={previous}->{rating}, actor={actor.id}"
    )
    publish(registration.volunteer_id, Notification.TOPIC_RATING_UPDATED, {
        "event_id": event.id,
        "volunteer_id": registration.volunteer_id,
        "event_title": event.title,
        "rating": rating,
        "message": f"You were rated {rating}/5 for \"{event.title}\".",
    })
    return registration


def submit_feedback(volunteer, event_id, rating, text=None) -> EventRegistration:
    """Volunteer rates the event once, after attendance is finalized."""
    require_volunteer(volunteer)
    rating = validate_rating(rating)
    text = validate_feedback_text(text)

    with locked_event(event_id) as event:
        if not event.attendance_locked:
            raise InvalidState("Feedback can only be submitted after attendance is finalized")

        try:
            registration = event.registrations.select_for_update().get(volunteer=volunteer)
        except EventRegistration.DoesNotExist:
            raise NotFound("You are not registered for this event")

        if registration.status != EventRegistration.STATUS_APPROVED or not registration.present:
            raise InvalidState("Only volunteers who attended can leave feedback")
        if registration.feedback_submitted:
            raise AlreadySubmitted("Feedback already submitted for this event")

        registration.volunteer_rating_for_event = rating
        registration.volunteer_feedback = text
        registration.feedback_submitted_at = now()
        registration.save(update_fields=[
            "volunteer_rating_for_event",
            "volunteer_feedback",
            "feedback_submitted_at",
            "updated_at",
        ])

    logger.info(f"Feedback submitted: event={event.id}, volunteer={volunteer.id}, rating={rating}")
    publish(event.organizer_id, Notification.TOPIC_FEEDBACK_SUBMITTED, {
        "event_id": event.id,
        "volunteer_id": volunteer.id,
        "event_title": event.title,
        "rating": rating,
        "message": f"{registration.name} rated \"{event.title}\" {rating}/5.",
    })
    return registration


def feedback_summary(actor, event_id) -> dict:
    event = get_active_event(event_id)
    require_manager(actor, event)

    rated = event.registrations.filter(volunteer_rating_for_event__isnull=False)
    totals = rated.aggregate(average=Avg("volunteer_rating_for_event"), count=Count("id"))

    distribution = {str(star): 0 for star in range(1, 6)}
    for row in rated.values("volunteer_rating_for_event").annotate(n=Count("id")):
        distribution[str(row["volunteer_rating_for_event"])] = row["n"]

    average = totals["average"]
    return {
        "event_id": event.id,
        "average_rating": round(average, 2) if average is not None else None,
        "count": totals["count"],
        "distribution": distribution,
        "comments": [
            {"name": reg.name, "rating": reg.volunteer_rating_for_event, "feedback": reg.volunteer_feedback}
            for reg in rated.order_by("-feedback_submitted_at", "-id")
            if reg.volunteer_feedback
        ],
    }
