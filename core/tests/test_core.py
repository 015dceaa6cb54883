# core/tests/test_core.py
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import AlreadyFinalized, Conflict, InvalidState, NotFound
from events.models import Event, EventRegistration

User = get_user_model()


class HealthCheckTest(TestCase):
    def test_health(self):
        res = APIClient().get(reverse("health-check"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "ok")
        self.assertTrue(res.data["db"])


class ServiceErrorTest(TestCase):
    def test_codes_and_messages(self):
        err = Conflict("Your application is already pending organizer approval")
        self.assertIsInstance(err, InvalidState)
        self.assertEqual(err.code, "conflict")
        self.assertEqual(err.status_code, 409)
        self.assertEqual(str(err), "Your application is already pending organizer approval")

        self.assertEqual(NotFound().message, "Not found.")
        self.assertEqual(AlreadyFinalized().code, "already_finalized")


class SeedDataCommandTest(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_data", stdout=StringIO())
        call_command("seed_data", stdout=StringIO())

        self.assertEqual(User.objects.filter(username__in=["admin", "organizer", "alice", "bob"]).count(), 4)
        event = Event.objects.get(title="Riverside Clean-up")
        statuses = dict(event.registrations.values_list("volunteer__username", "status"))
        self.assertEqual(statuses, {
            "alice": EventRegistration.STATUS_APPROVED,
            "bob": EventRegistration.STATUS_PENDING,
        })
        self.assertEqual(event.total_registrations, 1)
