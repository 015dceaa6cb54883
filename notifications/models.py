# notifications/models.py
from django.conf import settings
from django.db import models


class Notification(models.Model):
    TOPIC_REGISTRATION_UPDATED = "registrationUpdated"
    TOPIC_ATTENDANCE_UPDATED = "attendanceUpdated"
    TOPIC_CERTIFICATE_READY = "certificateReady"
    TOPIC_RATING_UPDATED = "ratingUpdated"
    TOPIC_FEEDBACK_SUBMITTED = "feedbackSubmitted"
    TOPIC_EVENT_COMPLETED = "eventCompleted"
    TOPIC_EVENT_DELETED = "eventDeleted"
    TOPIC_EVENT_UPDATED = "eventUpdated"
    TOPIC_EVENT_REJECTED = "eventRejected"

    TOPIC_CHOICES = [
        (TOPIC_REGISTRATION_UPDATED, "Registration Updated"),
        (TOPIC_ATTENDANCE_UPDATED, "Attendance Updated"),
        (TOPIC_CERTIFICATE_READY, "Certificate Ready"),
        (TOPIC_RATING_UPDATED, "Rating Updated"),
        (TOPIC_FEEDBACK_SUBMITTED, "Feedback Submitted"),
        (TOPIC_EVENT_COMPLETED, "Event Completed"),
        (TOPIC_EVENT_DELETED, "Event Deleted"),
        (TOPIC_EVENT_UPDATED, "Event Updated"),
        (TOPIC_EVENT_REJECTED, "Event Rejected"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    topic = models.CharField(max_length=64, choices=TOPIC_CHOICES)
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    # Optional linking to event; kept when the event is soft-deleted
    event = models.ForeignKey(
        "events.Event",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
            models.Index(fields=["topic"], name="notif_topic_idx"),
        ]

    def __str__(self):
        return f"{self.user} - {self.topic} - {self.title}"
