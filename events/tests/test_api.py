# events/tests/test_api.py
from datetime import timedelta
from unittest.mock import patch

from django.db import connection
from django.test import TestCase, override_settings
from django.test.utils import CaptureQueriesContext
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework.throttling import ScopedRateThrottle

from events.models import Event, EventRegistration
from events.tests.helpers import VolunlinkTestMixin, applicant
from volunteers.models import Certificate, VolunteerStats


class EventApiTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def as_user(self, user):
        self.client.force_authenticate(user=user)

    def test_open_events_are_public(self):
        self.make_event(title="Hidden", approved=False)

        res = self.client.get(reverse("event-list"))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["title"], "Beach Clean-up")
        self.assertEqual(res.data["results"][0]["available_spots"], 2)

    def test_create_event(self):
        self.as_user(self.organizer)
        start = timezone.now() + timedelta(days=10)
        res = self.client.post(reverse("event-list"), {
            "title": "Tree Planting",
            "location": "Park",
            "date": start.isoformat(),
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=3)).isoformat(),
            "max_volunteers": 5,
        }, format="json")

        self.assertEqual(res.status_code, 201, res.data)
        self.assertTrue(res.data["success"])
        self.assertEqual(res.data["data"]["title"], "Tree Planting")
        self.assertEqual(res.data["data"]["status"], Event.STATUS_UPCOMING)

    def test_create_event_capacity_error(self):
        self.as_user(self.organizer)
        res = self.client.post(reverse("event-list"), {
            "title": "Too big",
            "date": (timezone.now() + timedelta(days=1)).isoformat(),
            "max_volunteers": 5000,
        }, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["errors"]["code"], "validation_error")

    def test_volunteer_cannot_create_event(self):
        self.as_user(self.alice)
        res = self.client.post(reverse("event-list"), {
            "title": "Mine",
            "date": (timezone.now() + timedelta(days=1)).isoformat(),
            "max_volunteers": 5,
        }, format="json")
        self.assertEqual(res.status_code, 403)

    def test_anonymous_cannot_apply(self):
        res = self.client.post(reverse("event-apply", args=[self.event.id]), applicant(), format="json")
        self.assertEqual(res.status_code, 401)

    def test_apply_then_duplicate(self):
        self.as_user(self.alice)
        url = reverse("event-apply", args=[self.event.id])

        res = self.client.post(url, applicant(), format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["data"]["status"], EventRegistration.STATUS_PENDING)

        res = self.client.post(url, applicant(), format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["errors"]["code"], "conflict")

    def test_apply_with_bad_details(self):
        self.as_user(self.alice)
        res = self.client.post(
            reverse("event-apply", args=[self.event.id]), applicant(age=200), format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_apply_to_missing_event(self):
        self.as_user(self.alice)
        res = self.client.post(reverse("event-apply", args=[999999]), applicant(), format="json")
        self.assertEqual(res.status_code, 404)

    def test_approve_until_full(self):
        for volunteer in (self.alice, self.bob, self.carol):
            self.make_registration(volunteer)
        self.as_user(self.organizer)

        for volunteer in (self.alice, self.bob):
            res = self.client.patch(reverse("registration-approve", args=[self.event.id, volunteer.id]))
            self.assertEqual(res.status_code, 200, res.data)

        res = self.client.patch(reverse("registration-approve", args=[self.event.id, self.carol.id]))
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["errors"]["code"], "capacity_exceeded")

    def test_other_organizer_cannot_approve(self):
        self.make_registration(self.alice)
        self.as_user(self.other_organizer)
        res = self.client.patch(reverse("registration-approve", args=[self.event.id, self.alice.id]))
        self.assertEqual(res.status_code, 403)

    def test_reject_with_reason(self):
        self.make_registration(self.alice)
        self.as_user(self.organizer)
        res = self.client.patch(
            reverse("registration-reject", args=[self.event.id, self.alice.id]),
            {"reason": "Age requirement"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["rejection_reason"], "Age requirement")

    def test_cancel_needs_a_reason(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.as_user(self.alice)
        url = reverse("event-cancel", args=[self.event.id])

        res = self.client.post(url, {"reason": "busy"}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.post(url, {"reason": "Family emergency came up"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], EventRegistration.STATUS_CANCELLED)

    def test_volunteer_list_filters_by_status(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.make_registration(self.bob)
        self.as_user(self.organizer)

        res = self.client.get(reverse("event-volunteers", args=[self.event.id]), {"status": "pending"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["volunteer"], self.bob.id)

    def test_remove_pending(self):
        self.make_registration(self.bob)
        self.as_user(self.organizer)
        res = self.client.delete(reverse("registration-remove", args=[self.event.id, self.bob.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], "removed")

    def test_my_applied_events(self):
        self.make_registration(self.alice)
        self.as_user(self.alice)

        res = self.client.get(reverse("my-applied-events"))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["my_registration"]["status"], EventRegistration.STATUS_PENDING)

    def test_organizer_cannot_list_applied(self):
        self.as_user(self.organizer)
        self.assertEqual(self.client.get(reverse("my-applied-events")).status_code, 403)

    def test_complete_and_delete(self):
        self.as_user(self.organizer)
        res = self.client.post(reverse("event-complete", args=[self.event.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], Event.STATUS_COMPLETED)

        res = self.client.delete(reverse("event-detail", args=[self.event.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.client.get(reverse("event-detail", args=[self.event.id])).status_code, 404)


@override_settings(CERTIFICATE_RENDERER="events.tests.helpers.fake_renderer")
class AttendanceApiTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.complete()

    def test_full_flow(self):
        self.client.force_authenticate(user=self.organizer)

        res = self.client.put(reverse("event-attendance", args=[self.event.id]), {
            "volunteer_id": self.alice.id, "present": True, "work_duration": "3 hours",
        }, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertTrue(res.data["data"]["present"])

        res = self.client.post(reverse("event-attendance-finalize", args=[self.event.id]))
        self.assertEqual(res.status_code, 200, res.data)
        payload = res.data["data"]
        self.assertEqual(payload["credited"], [self.alice.id])
        self.assertEqual(payload["certificates_issued"], [self.alice.id])
        self.assertFalse(payload["partial"])
        self.assertTrue(payload["locked"])

        res = self.client.post(reverse("event-attendance-finalize", args=[self.event.id]))
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["errors"]["code"], "already_finalized")

        res = self.client.put(reverse("event-attendance", args=[self.event.id]), {
            "volunteer_id": self.alice.id, "present": False,
        }, format="json")
        self.assertEqual(res.status_code, 409)

        res = self.client.post(reverse("event-rate-volunteer", args=[self.event.id]), {
            "volunteer_id": self.alice.id, "rating": 5,
        }, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["data"]["rating_history"]), 1)
        self.assertEqual(Certificate.objects.get(volunteer=self.alice).rating, 5)

        self.client.force_authenticate(user=self.alice)
        res = self.client.post(reverse("event-volunteer-feedback", args=[self.event.id]), {
            "rating": 4, "feedback": "Well organised",
        }, format="json")
        self.assertEqual(res.status_code, 201)

        res = self.client.post(reverse("event-volunteer-feedback", args=[self.event.id]), {
            "rating": 4,
        }, format="json")
        self.assertEqual(res.status_code, 409)

        res = self.client.get(reverse("my-completed-events"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["results"][0]["certificate_url"], "/media/certificates/alice-smith.pdf")

        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event-feedback-stats", args=[self.event.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["average_rating"], 4.0)

        stats = VolunteerStats.objects.get(volunteer=self.alice)
        self.assertAlmostEqual(stats.impact_score, 30.0)

    def test_partial_finalize_returns_200(self):
        self.client.force_authenticate(user=self.organizer)
        self.client.put(reverse("event-attendance", args=[self.event.id]), {
            "volunteer_id": self.alice.id, "present": True, "work_duration": "3 hours",
        }, format="json")

        with override_settings(CERTIFICATE_RENDERER="events.tests.helpers.failing_renderer"):
            res = self.client.post(reverse("event-attendance-finalize", args=[self.event.id]))

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["data"]["partial"])
        self.assertIn(str(self.alice.id), res.data["data"]["failures"])
        self.assertFalse(res.data["data"]["locked"])


class EventEditApiTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_patch_event(self):
        self.client.force_authenticate(user=self.organizer)
        url = reverse("event-detail", args=[self.event.id])

        res = self.client.patch(url, {"title": "Beach Clean-up (rescheduled)", "max_volunteers": 4}, format="json")

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["data"]["title"], "Beach Clean-up (rescheduled)")
        self.assertEqual(res.data["data"]["available_spots"], 4)

    def test_put_cannot_shrink_below_approved(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.make_registration(self.bob, EventRegistration.STATUS_APPROVED)
        self.client.force_authenticate(user=self.organizer)

        res = self.client.put(reverse("event-detail", args=[self.event.id]), {"max_volunteers": 1}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["errors"]["code"], "validation_error")

    def test_volunteer_cannot_edit(self):
        self.client.force_authenticate(user=self.alice)
        res = self.client.patch(reverse("event-detail", args=[self.event.id]), {"title": "Mine"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_admin_rejects_event(self):
        self.client.force_authenticate(user=self.admin)

        res = self.client.patch(
            reverse("event-reject", args=[self.event.id]), {"reason": "Duplicate listing"}, format="json",
        )

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["data"]["rejected"])
        self.assertEqual(self.client.get(reverse("event-detail", args=[self.event.id])).status_code, 404)

    def test_organizer_cannot_reject(self):
        self.client.force_authenticate(user=self.organizer)
        res = self.client.patch(reverse("event-reject", args=[self.event.id]), {}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_list_filters(self):
        self.make_event(title="Park Planting", location="City Park")

        res = self.client.get(reverse("event-list"), {"location": "beach"})
        self.assertEqual([e["title"] for e in res.data["results"]], ["Beach Clean-up"])

        res = self.client.get(reverse("event-list"), {"date": "soon"})
        self.assertEqual(res.status_code, 400)

    def test_organizer_sees_own_unapproved_events(self):
        self.make_event(title="Draft", approved=False)
        self.make_event(title="Someone else's draft", approved=False, organizer=self.other_organizer)

        self.client.force_authenticate(user=self.organizer)
        res = self.client.get(reverse("event-list"))

        self.assertEqual(sorted(e["title"] for e in res.data["results"]), ["Beach Clean-up", "Draft"])

    def test_list_query_count_does_not_grow_with_rows(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        url = reverse("event-list")

        with CaptureQueriesContext(connection) as one_row:
            self.client.get(url)

        for n in range(3):
            event = self.make_event(title=f"Extra {n}", organizer=self.other_organizer)
            self.make_registration(self.bob, EventRegistration.STATUS_APPROVED, event=event)

        with CaptureQueriesContext(connection) as four_rows:
            res = self.client.get(url)

        self.assertEqual(res.data["count"], 4)
        self.assertEqual(len(four_rows), len(one_row))
        spots = {e["title"]: e["available_spots"] for e in res.data["results"]}
        self.assertEqual(spots["Beach Clean-up"], 1)
        self.assertEqual(spots["Extra 0"], 1)


@patch.object(ScopedRateThrottle, "THROTTLE_RATES", {
    "event-create": "1/minute",
    "event-apply": "2/minute",
    "event-feedback": "2/minute",
})
class ThrottleApiTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_apply_is_rate_limited(self):
        self.client.force_authenticate(user=self.alice)
        url = reverse("event-apply", args=[self.event.id])

        self.assertEqual(self.client.post(url, applicant(), format="json").status_code, 201)
        # duplicate still counts against the limit
        self.assertEqual(self.client.post(url, applicant(), format="json").status_code, 409)

        res = self.client.post(url, applicant(), format="json")
        self.assertEqual(res.status_code, 429)
        self.assertFalse(res.data["success"])

    def test_event_creation_is_rate_limited_but_listing_is_not(self):
        self.client.force_authenticate(user=self.organizer)
        url = reverse("event-list")
        payload = {
            "title": "Food Drive",
            "date": (timezone.now() + timedelta(days=4)).isoformat(),
            "max_volunteers": 5,
        }

        for _ in range(3):
            self.assertEqual(self.client.get(url).status_code, 200)
        self.assertEqual(self.client.post(url, payload, format="json").status_code, 201)
        self.assertEqual(self.client.post(url, payload, format="json").status_code, 429)
        self.assertEqual(self.client.get(url).status_code, 200)

    def test_feedback_is_rate_limited(self):
        self.client.force_authenticate(user=self.alice)
        url = reverse("event-volunteer-feedback", args=[self.event.id])

        for _ in range(2):
            self.assertEqual(self.client.post(url, {"rating": 5}, format="json").status_code, 409)
        self.assertEqual(self.client.post(url, {"rating": 5}, format="json").status_code, 429)
