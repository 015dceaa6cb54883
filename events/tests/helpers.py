# events/tests/helpers.py
import shutil
import tempfile
import time
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import override_settings
from django.utils import timezone

from events.models import Event, EventRegistration

User = get_user_model()


def fake_renderer(volunteer_name, event_title, hours_text, issue_date):
    """Stands in for the PDF renderer where the document itself is not under test."""
    slug = volunteer_name.lower().replace(" ", "-")
    return f"/media/certificates/{slug}.pdf"


def failing_renderer(volunteer_name, event_title, hours_text, issue_date):
    raise RuntimeError("renderer offline")


def slow_renderer(volunteer_name, event_title, hours_text, issue_date):
    """Takes longer than the render timeout the tests configure."""
    time.sleep(1)
    return fake_renderer(volunteer_name, event_title, hours_text, issue_date)


def picky_renderer(volunteer_name, event_title, hours_text, issue_date):
    """Fails for anyone whose snapshot name contains 'Broken'."""
    if "Broken" in volunteer_name:
        raise RuntimeError(f"cannot render for {volunteer_name}")
    return fake_renderer(volunteer_name, event_title, hours_text, issue_date)


def applicant(name="Alice Smith", age=25, gender="female", phone="555-0101"):
    return {"name": name, "age": age, "gender": gender, "phone": phone}


class VolunlinkTestMixin:
    """
    Users, an open event, and a temporary MEDIA_ROOT.
    """

    def setUp(self):
        super().setUp()
        # Throttle counters live in the cache; start every test from zero
        cache.clear()
        # Temporary MEDIA_ROOT for tests (so ReportLab output goes to temp)
        self.temp_media = tempfile.mkdtemp(prefix="test_media_")
        self._media_override = override_settings(MEDIA_ROOT=self.temp_media)
        self._media_override.enable()

        self.admin = User.objects.create_user(username="admin", password="pass123", role=User.ROLE_ADMIN)
        self.organizer = User.objects.create_user(
            username="org", password="pass123", role=User.ROLE_ORGANIZER, email="org@example.com",
        )
        self.other_organizer = User.objects.create_user(
            username="org2", password="pass123", role=User.ROLE_ORGANIZER,
        )
        self.alice = User.objects.create_user(
            username="alice", password="pass123", role=User.ROLE_VOLUNTEER,
            first_name="Alice", last_name="Smith", email="alice@example.com",
        )
        self.bob = User.objects.create_user(
            username="bob", password="pass123", role=User.ROLE_VOLUNTEER, email="bob@example.com",
        )
        self.carol = User.objects.create_user(
            username="carol", password="pass123", role=User.ROLE_VOLUNTEER,
        )

        self.event = self.make_event()

    def tearDown(self):
        self._media_override.disable()
        shutil.rmtree(self.temp_media, ignore_errors=True)
        super().tearDown()

    def make_event(self, **overrides):
        start = timezone.now() + timedelta(days=3)
        fields = {
            "organizer": self.organizer,
            "title": "Beach Clean-up",
            "description": "Bring gloves",
            "location": "North Beach",
            "date": start,
            "start_time": start,
            "end_time": start + timedelta(hours=2),
            "max_volunteers": 2,
            "approved": True,
        }
        fields.update(overrides)
        return Event.objects.create(**fields)

    def make_registration(self, volunteer, status=EventRegistration.STATUS_PENDING, event=None, **overrides):
        """Insert a registration directly, bypassing the ledger."""
        event = event or self.event
        fields = {
            "event": event,
            "volunteer": volunteer,
            "status": status,
            "name": volunteer.get_full_name() or volunteer.username.title(),
            "age": 30,
            "gender": "other",
            "phone": "555-0100",
        }
        if status == EventRegistration.STATUS_APPROVED:
            fields["counted_in_total"] = True
        fields.update(overrides)
        registration = EventRegistration.objects.create(**fields)
        if registration.counted_in_total:
            Event.objects.filter(pk=event.pk).update(total_registrations=event.total_registrations + 1)
            event.refresh_from_db()
        return registration

    def complete(self, event=None):
        event = event or self.event
        Event.objects.filter(pk=event.pk).update(status=Event.STATUS_COMPLETED)
        event.refresh_from_db()
        return event
