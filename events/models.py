# events/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models.functions import Coalesce
from django.utils import timezone


class EventQuerySet(models.QuerySet):
    def active(self):
        """Everything that has not been soft-deleted."""
        return self.filter(is_deleted=False)

    def with_approved_total(self):
        """
        Annotate `approved_total` for list serializers. A subquery rather
        than Count() so joins from earlier registration filters are not reused.
        """
        approved = (
            EventRegistration.objects.filter(
                event=models.OuterRef("pk"),
                status=EventRegistration.STATUS_APPROVED,
            )
            .order_by()
            .values("event")
            .annotate(n=models.Count("id"))
            .values("n")
        )
        return self.select_related("organizer").annotate(
            approved_total=Coalesce(
                models.Subquery(approved, output_field=models.IntegerField()),
                models.Value(0),
            )
        )

    def open_for_applications(self):
        return self.active().filter(
            approved=True,
            status=Event.STATUS_UPCOMING,
            date__gte=timezone.now(),
        )


class Event(models.Model):
    STATUS_UPCOMING = "upcoming"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_UPCOMING, "Upcoming"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    MAX_VOLUNTEERS_LIMIT = 1000

    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organized_events",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)

    date = models.DateTimeField()
    # Used to derive the scheduled duration when no work duration was entered
    start_time = models.DateTimeField(blank=True, null=True)
    end_time = models.DateTimeField(blank=True, null=True)
    registration_deadline = models.DateTimeField(blank=True, null=True)

    max_volunteers = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_VOLUNTEERS_LIMIT)],
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UPCOMING)
    approved = models.BooleanField(default=False)

    # Soft delete flag so we don't lose historical data and certificates
    is_deleted = models.BooleanField(default=False, db_index=True)
    # Once true, attendance can no longer be edited or re-finalized
    attendance_locked = models.BooleanField(default=False)

    total_volunteer_hours = models.FloatField(default=0)
    total_registrations = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organizer", "date"], name="event_org_date_idx"),
            models.Index(fields=["approved", "status", "date"], name="event_open_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_volunteers__gte=1),
                name="event_max_volunteers_gte_1",
            ),
            models.CheckConstraint(
                condition=models.Q(total_volunteer_hours__gte=0),
                name="event_total_hours_gte_0",
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def approved_volunteer_ids(self):
        return set(
            self.registrations.filter(
                status=EventRegistration.STATUS_APPROVED
            ).values_list("volunteer_id", flat=True)
        )

    def approved_count(self):
        return self.registrations.filter(status=EventRegistration.STATUS_APPROVED).count()

    @property
    def available_spots(self):
        return max(0, self.max_volunteers - self.approved_count())

    @property
    def is_full(self):
        return self.approved_count() >= self.max_volunteers

    def scheduled_duration_hours(self):
        """Hours between start_time and end_time, 0 when missing or inverted."""
        if not self.start_time or not self.end_time:
            return 0.0
        seconds = (self.end_time - self.start_time).total_seconds()
        if seconds <= 0:
            return 0.0
        return seconds / 3600


class EventRegistration(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    GENDER_CHOICES = [
        ("male", "Male"),
        ("female", "Female"),
        ("other", "Other"),
        ("prefer-not-to-say", "Prefer not to say"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="event_registrations",
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Applicant snapshot, captured at apply time and refreshed on reapply
    name = models.CharField(max_length=100)
    age = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(120)],
    )
    gender = models.CharField(max_length=20, choices=GENDER_CHOICES)
    phone = models.CharField(max_length=20)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    reviewed_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.CharField(max_length=300, blank=True, default="")
    cancellation_reason = models.CharField(max_length=500, blank=True, default="")
    reapply_count = models.PositiveIntegerField(default=0)

    # Whether this volunteer is currently included in event.total_registrations
    counted_in_total = models.BooleanField(default=False)

    # Attendance (meaningful only once the event is completed)
    present = models.BooleanField(default=False)
    attendance_marked_at = models.DateTimeField(blank=True, null=True)
    # Free-form text entered by the organizer, e.g. "3 hours", "2.5 hrs"
    work_duration = models.CharField(max_length=100, blank=True, default="")

    # Finalization bookkeeping; hours_credited_at is set in the same
    # transaction that increments the volunteer aggregates
    hours_credited_at = models.DateTimeField(blank=True, null=True)
    credited_hours = models.FloatField(default=0)
    certificate_generated = models.BooleanField(default=False)

    # Organizer -> volunteer
    organizer_rating = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    # Volunteer -> organizer, one time only
    volunteer_rating_for_event = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    volunteer_feedback = models.TextField(max_length=1000, blank=True, default="")
    feedback_submitted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "volunteer"],
                name="uq_registration_event_volunteer",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="reg_event_status_idx"),
            models.Index(fields=["volunteer", "status"], name="reg_volunteer_status_idx"),
        ]

    def __str__(self):
        return f"{self.name} -> {self.event.title} ({self.status})"

    @property
    def hours_credited(self):
        return self.hours_credited_at is not None

    @property
    def feedback_submitted(self):
        return self.volunteer_rating_for_event is not None or bool(
            (self.volunteer_feedback or "").strip()
        )


class VolunteerRatingLog(models.Model):
    """
    Immutable audit trail of organizer ratings.
    The registration keeps only the latest value; every change lands here.
    """
    registration = models.ForeignKey(
        EventRegistration,
        on_delete=models.CASCADE,
        related_name="rating_logs",
    )
    rated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="given_volunteer_ratings",
    )
    previous_rating = models.PositiveSmallIntegerField(blank=True, null=True)
    rating = models.PositiveSmallIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["registration", "created_at"], name="ratinglog_reg_created_idx"),
        ]

    def __str__(self):
        return f"{self.registration_id}: {self.previous_rating} -> {self.rating}"
