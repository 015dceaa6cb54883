import logging

from django.db import IntegrityError, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest

from .models import Certificate, VolunteerStats

logger = logging.getLogger("volunlink.volunteers")


class VolunteerAggregateStore:
    """
    Per-volunteer totals and certificates.

    Every numeric update is a single UPDATE with F() so concurrent
    finalizations on different events never lose increments, and every
    value is floored at zero.
    """

    @classmethod
    def stats_for(cls, volunteer_id):
        stats, _ = VolunteerStats.objects.get_or_create(volunteer_id=volunteer_id)
        return stats

    @classmethod
    def _increment(cls, volunteer_id, field, amount):
        with transaction.atomic():
            VolunteerStats.objects.get_or_create(volunteer_id=volunteer_id)
            VolunteerStats.objects.filter(volunteer_id=volunteer_id).update(
                **{field: Greatest(F(field) + Value(amount), Value(type(amount)(0)))}
            )

    @classmethod
    def increment_hours(cls, volunteer_id, hours):
        cls._increment(volunteer_id, "total_volunteer_hours", float(hours))

    @classmethod
    def increment_impact_score(cls, volunteer_id, points):
        cls._increment(volunteer_id, "impact_score", float(points))

    @classmethod
    def increment_completed_count(cls, volunteer_id, by=1):
        cls._increment(volunteer_id, "completed_events_count", int(by))

    @classmethod
    def certificate_for(cls, event_id, volunteer_id):
        return Certificate.objects.filter(event_id=event_id, volunteer_id=volunteer_id).first()

    @classmethod
    def append_certificate(cls, event, volunteer_id, *, hours, hours_text, document_url, rating=None):
        """
        Store the certificate for (event, volunteer).
        Returns (certificate, created). An existing certificate is reused
        untouched, so a retried finalize never duplicates one.
        """
        existing = cls.certificate_for(event.id, volunteer_id)
        if existing:
            return existing, False

        try:
            with transaction.atomic():
                certificate = Certificate.objects.create(
                    event=event,
                    volunteer_id=volunteer_id,
                    event_title=event.title,
                    hours=max(0.0, float(hours)),
                    hours_text=hours_text,
                    rating=rating,
                    document_url=document_url,
                )
        except IntegrityError:
            logger.info(
                f"Certificate already exists for event={event.id} volunteer={volunteer_id}; reusing it"
            )
            return cls.certificate_for(event.id, volunteer_id), False

        logger.info(
            f"Certificate {certificate.credential_id} issued: event={event.id}, volunteer={volunteer_id}"
        )
        return certificate, True

    @classmethod
    def update_certificate_rating(cls, event_id, volunteer_id, rating):
        """Returns True when a certificate existed and was updated."""
        updated = Certificate.objects.filter(
            event_id=event_id, volunteer_id=volunteer_id
        ).update(rating=rating)
        return bool(updated)
