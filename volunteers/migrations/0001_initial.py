import django.db.models.deletion
import volunteers.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="VolunteerStats",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_volunteer_hours", models.FloatField(default=0)),
                ("impact_score", models.FloatField(default=0)),
                ("completed_events_count", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "volunteer",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="volunteer_stats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "volunteer stats",
                "indexes": [
                    models.Index(fields=["-impact_score"], name="vstats_impact_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Certificate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_title", models.CharField(max_length=200)),
                ("hours", models.FloatField(default=0)),
                ("hours_text", models.CharField(max_length=32)),
                ("rating", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("issued_at", models.DateTimeField(auto_now_add=True)),
                ("document_url", models.CharField(max_length=500)),
                (
                    "credential_id",
                    models.CharField(default=volunteers.models._credential_id, max_length=32, unique=True),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="certificates",
                        to="events.event",
                    ),
                ),
                (
                    "volunteer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="certificates",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-issued_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "volunteer"),
                        name="uq_certificate_event_volunteer",
                    ),
                ],
            },
        ),
    ]
