import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("date", models.DateTimeField()),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("registration_deadline", models.DateTimeField(blank=True, null=True)),
                (
                    "max_volunteers",
                    models.PositiveIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(1000),
                        ]
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("upcoming", "Upcoming"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        default="upcoming",
                        max_length=20,
                    ),
                ),
                ("approved", models.BooleanField(default=False)),
                ("is_deleted", models.BooleanField(db_index=True, default=False)),
                ("attendance_locked", models.BooleanField(default=False)),
                ("total_volunteer_hours", models.FloatField(default=0)),
                ("total_registrations", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["organizer", "date"], name="event_org_date_idx"),
                    models.Index(fields=["approved", "status", "date"], name="event_open_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_volunteers__gte", 1)),
                        name="event_max_volunteers_gte_1",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_volunteer_hours__gte", 0)),
                        name="event_total_hours_gte_0",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EventRegistration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                (
                    "age",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(120),
                        ]
                    ),
                ),
                (
                    "gender",
                    models.CharField(
                        choices=[
                            ("male", "Male"),
                            ("female", "Female"),
                            ("other", "Other"),
                            ("prefer-not-to-say", "Prefer not to say"),
                        ],
                        max_length=20,
                    ),
                ),
                ("phone", models.CharField(max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=300)),
                ("cancellation_reason", models.CharField(blank=True, default="", max_length=500)),
                ("reapply_count", models.PositiveIntegerField(default=0)),
                ("counted_in_total", models.BooleanField(default=False)),
                ("present", models.BooleanField(default=False)),
                ("attendance_marked_at", models.DateTimeField(blank=True, null=True)),
                ("work_duration", models.CharField(blank=True, default="", max_length=100)),
                ("hours_credited_at", models.DateTimeField(blank=True, null=True)),
                ("credited_hours", models.FloatField(default=0)),
                ("certificate_generated", models.BooleanField(default=False)),
                (
                    "organizer_rating",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                (
                    "volunteer_rating_for_event",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("volunteer_feedback", models.TextField(blank=True, default="", max_length=1000)),
                ("feedback_submitted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "volunteer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="event_registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="reg_event_status_idx"),
                    models.Index(fields=["volunteer", "status"], name="reg_volunteer_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "volunteer"),
                        name="uq_registration_event_volunteer",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VolunteerRatingLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_rating", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("rating", models.PositiveSmallIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "rated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="given_volunteer_ratings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rating_logs",
                        to="events.eventregistration",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["registration", "created_at"], name="ratinglog_reg_created_idx"),
                ],
            },
        ),
    ]
