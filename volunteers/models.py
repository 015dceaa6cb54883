import uuid

from django.conf import settings
from django.db import models


class VolunteerStats(models.Model):
    """
    Denormalized running totals per volunteer.
    Written only by finalization (through VolunteerAggregateStore).
    """
    volunteer = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="volunteer_stats",
    )

    total_volunteer_hours = models.FloatField(default=0)
    impact_score = models.FloatField(default=0)
    completed_events_count = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "volunteer stats"
        indexes = [
            models.Index(fields=["-impact_score"], name="vstats_impact_idx"),  # Leaderboard
        ]

    def __str__(self):
        return f"{self.volunteer}: {self.total_volunteer_hours:.2f}h, {self.impact_score:.0f} pts"


def _credential_id():
    return uuid.uuid4().hex[:12].upper()


class Certificate(models.Model):
    """
    Certificate of participation for one volunteer on one event.
    At most one exists per (event, volunteer).
    """
    event = models.ForeignKey(
        "events.Event",
        on_delete=models.CASCADE,
        related_name="certificates",
    )
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="certificates",
    )

    # Snapshot so the certificate survives event edits
    event_title = models.CharField(max_length=200)
    hours = models.FloatField(default=0)
    hours_text = models.CharField(max_length=32)
    rating = models.PositiveSmallIntegerField(blank=True, null=True)

    issued_at = models.DateTimeField(auto_now_add=True)
    document_url = models.CharField(max_length=500)
    credential_id = models.CharField(max_length=32, unique=True, default=_credential_id)

    class Meta:
        ordering = ["-issued_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "volunteer"],
                name="uq_certificate_event_volunteer",
            ),
        ]

    def __str__(self):
        return f"Certificate {self.credential_id} - {self.volunteer} @ {self.event_title}"
