# events/services/finalization.py
"""
Attendance finalization.

finalize() turns marked attendance into credited hours, impact score
and certificates in three phases:

1. Credit hours. One transaction under the event row lock. Each
   registration's hours_credited_at is written together with the
   aggregate increments, so a retry never counts anyone twice.
2. Issue certificates. Rendering is slow and can fail, so it runs
   outside any transaction, one bounded render per volunteer.
   Failures are collected and the loop moves on.
3. Lock attendance, only when nobody is left without a certificate.
   Otherwise the event stays open for another finalize() call.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
import logging

from django.conf import settings
from django.db import transaction

from core.exceptions import AlreadyFinalized
from notifications.dispatcher import publish
from notifications.models import Notification
from volunteers.store import VolunteerAggregateStore

from ..certificate_generator import get_renderer
from ..datetime_utils import credited_hours_for, format_hours, now
from ..locks import event_lock, get_active_event, locked_event
from ..models import Event, EventRegistration
from ..permissions import require_manager

logger = logging.getLogger("volunlink.events")


@dataclass
class FinalizationResult:
    event_id: int
    credited: list = field(default_factory=list)
    certificates_issued: list = field(default_factory=list)
    failures: dict = field(default_factory=dict)
    hours_added: float = 0.0
    locked: bool = False

    @property
    def partial(self):
        return bool(self.failures)

    def as_dict(self):
        return {
            "event_id": self.event_id,
            "credited": self.credited,
            "certificates_issued": self.certificates_issued,
            "failures": {str(k): v for k, v in self.failures.items()},
            "hours_added": round(self.hours_added, 2),
            "locked": self.locked,
            "partial": self.partial,
        }


def _render_bounded(renderer, timeout, **kwargs):
    """
    Run one render on a worker thread and wait at most `timeout` seconds.
    A render that overruns is abandoned; its thread is not joined.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="certificate-render")
    try:
        future = executor.submit(renderer, **kwargs)
        return future.result(timeout=timeout)
    except FuturesTimeout:
        future.cancel()
        raise TimeoutError(f"Certificate rendering exceeded {timeout:g}s")
    finally:
        executor.shutdown(wait=False)


def _credit_hours(event, result):
    """Phase 1. Runs inside locked_event()."""
    if event.status != Event.STATUS_COMPLETED:
        event.status = Event.STATUS_COMPLETED

    pending_credit = event.registrations.select_for_update().filter(
        status=EventRegistration.STATUS_APPROVED,
        present=True,
        hours_credited_at__isnull=True,
    )

    points_per_hour = settings.IMPACT_POINTS_PER_HOUR
    for registration in pending_credit:
        hours = credited_hours_for(registration, event)

        if hours > 0:
            volunteer_id = registration.volunteer_id
            VolunteerAggregateStore.increment_hours(volunteer_id, hours)
            VolunteerAggregateStore.increment_impact_score(volunteer_id, hours * points_per_hour)
            VolunteerAggregateStore.increment_completed_count(volunteer_id)
            event.total_volunteer_hours += hours
            result.hours_added += hours

        registration.credited_hours = hours
        registration.hours_credited_at = now()
        registration.save(update_fields=["credited_hours", "hours_credited_at", "updated_at"])
        result.credited.append(registration.volunteer_id)

        logger.info(
            f"Hours credited: event={event.id}, volunteer={registration.volunteer_id}, hours={hours:.2f}"
        )

    event.save(update_fields=["status", "total_volunteer_hours", "updated_at"])


def _issue_certificates(event, result):
    """Phase 2. Returns the registrations whose certificate was created in this run."""
    renderer = get_renderer()
    timeout = settings.CERTIFICATE_RENDER_TIMEOUT
    issued = []

    awaiting = (
        EventRegistration.objects.select_related("volunteer")
        .filter(event=event, hours_credited_at__isnull=False, certificate_generated=False)
        .order_by("id")
    )

    for registration in awaiting:
        volunteer = registration.volunteer
        hours_text = format_hours(registration.credited_hours)
        certificate = VolunteerAggregateStore.certificate_for(event.id, volunteer.id)

        if certificate is None:
            try:
                document_url = _render_bounded(
                    renderer,
                    timeout,
                    volunteer_name=registration.name or volunteer.display_name,
                    event_title=event.title,
                    hours_text=hours_text,
                    issue_date=now(),
                )
            except Exception as e:
                logger.warning(
                    f"Certificate render failed: event={event.id}, volunteer={volunteer.id}: {e}"
                )
                result.failures[volunteer.id] = str(e) or e.__class__.__name__
                continue

            certificate, created = VolunteerAggregateStore.append_certificate(
                event,
                volunteer.id,
                hours=registration.credited_hours,
                hours_text=hours_text,
                document_url=document_url,
                rating=registration.organizer_rating,
            )
            if created:
                issued.append(registration)
                result.certificates_issued.append(volunteer.id)

        if registration.organizer_rating is not None and certificate.rating != registration.organizer_rating:
            VolunteerAggregateStore.update_certificate_rating(
                event.id, volunteer.id, registration.organizer_rating
            )

        EventRegistration.objects.filter(pk=registration.pk).update(certificate_generated=True)

    return issued


def _lock_attendance(event_id, result):
    """Phase 3."""
    with locked_event(event_id) as event:
        missing = event.registrations.filter(
            hours_credited_at__isnull=False,
            certificate_generated=False,
        ).exists()
        if result.failures or missing:
            logger.warning(
                f"Finalization incomplete, attendance left open: event={event.id}, "
                f"failures={sorted(result.failures)}"
            )
            return event

        event.attendance_locked = True
        event.save(update_fields=["attendance_locked", "updated_at"])
        result.locked = True
    return event


def finalize(actor, event_id) -> FinalizationResult:
    """
    Credit hours and issue certificates for everyone marked present.
    Safe to call again after a partial failure.
    """
    event = get_active_event(event_id)

    with event_lock(event.id):
        with locked_event(event.id) as event:
            require_manager(actor, event)
            if event.attendance_locked:
                raise AlreadyFinalized("Attendance is already finalized for this event")

            result = FinalizationResult(event_id=event.id)
            _credit_hours(event, result)

        issued = _issue_certificates(event, result)
        event = _lock_attendance(event.id, result)

    logger.info(
        f"Event finalized: event={event.id}, credited={len(result.credited)}, "
        f"certificates={len(result.certificates_issued)}, failures={len(result.failures)}, "
        f"hours_added={result.hours_added:.2f}, locked={result.locked}, actor={actor.id}"
    )

    for registration in issued:
        payload = {
            "event_id": event.id,
            "volunteer_id": registration.volunteer_id,
            "event_title": event.title,
            "hours_text": format_hours(registration.credited_hours),
            "message": f"Your certificate for \"{event.title}\" is ready.",
        }
        publish(registration.volunteer_id, Notification.TOPIC_CERTIFICATE_READY, payload)
        if registration.organizer_rating is not None:
            publish(registration.volunteer_id, Notification.TOPIC_RATING_UPDATED, {
                "event_id": event.id,
                "volunteer_id": registration.volunteer_id,
                "event_title": event.title,
                "rating": registration.organizer_rating,
                "message": f"You were rated {registration.organizer_rating}/5 for \"{event.title}\".",
            })

    return result
