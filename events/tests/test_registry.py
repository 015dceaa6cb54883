# events/tests/test_registry.py
from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from core.exceptions import Forbidden, InvalidState, NotFound, ValidationError
from events import services
from events.locks import get_active_event
from events.models import Event, EventRegistration
from events.tests.helpers import VolunlinkTestMixin
from notifications.models import Notification


class CreateEventTest(VolunlinkTestMixin, TestCase):
    def payload(self, **overrides):
        start = timezone.now() + timedelta(days=7)
        data = {
            "title": "  Food   Drive\n  ",
            "description": "Sort donations",
            "location": "Community Hall",
            "date": start,
            "start_time": start,
            "end_time": start + timedelta(hours=4),
            "max_volunteers": 10,
        }
        data.update(overrides)
        return data

    def test_create(self):
        event = services.create_event(self.organizer, self.payload())

        self.assertEqual(event.title, "Food Drive")
        self.assertEqual(event.organizer, self.organizer)
        self.assertEqual(event.status, Event.STATUS_UPCOMING)
        self.assertEqual(event.total_registrations, 0)
        self.assertTrue(event.approved)
        self.assertEqual(event.scheduled_duration_hours(), 4.0)

    @override_settings(EVENT_AUTO_APPROVE=False)
    def test_needs_admin_approval_when_auto_approve_is_off(self):
        event = services.create_event(self.organizer, self.payload())
        self.assertFalse(event.approved)
        self.assertNotIn(event, services.open_events())

        with self.assertRaises(Forbidden):
            services.approve_event(self.organizer, event.id)

        services.approve_event(self.admin, event.id)
        event.refresh_from_db()
        self.assertTrue(event.approved)
        self.assertIn(event, services.open_events())

    def test_invalid_payloads(self):
        cases = {
            "blank title": {"title": "   "},
            "zero capacity": {"max_volunteers": 0},
            "capacity over limit": {"max_volunteers": 1001},
            "capacity not a number": {"max_volunteers": "lots"},
            "missing date": {"date": None},
            "past date": {"date": timezone.now() - timedelta(days=1)},
            "inverted times": {"end_time": timezone.now() + timedelta(days=6)},
            "late deadline": {"registration_deadline": timezone.now() + timedelta(days=8)},
        }
        for label, overrides in cases.items():
            with self.subTest(label):
                with self.assertRaises(ValidationError):
                    services.create_event(self.organizer, self.payload(**overrides))

    def test_volunteers_cannot_create(self):
        with self.assertRaises(Forbidden):
            services.create_event(self.alice, self.payload())

    def test_admin_can_create(self):
        event = services.create_event(self.admin, self.payload())
        self.assertEqual(event.organizer, self.admin)


class EventLifecycleTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.make_registration(self.bob, EventRegistration.STATUS_PENDING)

    def test_complete_notifies_participants(self):
        event = services.complete_event(self.organizer, self.event.id)

        self.assertEqual(event.status, Event.STATUS_COMPLETED)
        recipients = set(
            Notification.objects.filter(topic=Notification.TOPIC_EVENT_COMPLETED).values_list("user_id", flat=True)
        )
        self.assertEqual(recipients, {self.organizer.id, self.alice.id})

    def test_complete_twice(self):
        services.complete_event(self.organizer, self.event.id)
        with self.assertRaises(InvalidState):
            services.complete_event(self.organizer, self.event.id)

    def test_complete_cancelled_event(self):
        Event.objects.filter(pk=self.event.pk).update(status=Event.STATUS_CANCELLED)
        with self.assertRaises(InvalidState):
            services.complete_event(self.organizer, self.event.id)

    def test_complete_requires_manager(self):
        with self.assertRaises(Forbidden):
            services.complete_event(self.other_organizer, self.event.id)

    def test_soft_delete_hides_event(self):
        services.delete_event(self.organizer, self.event.id)

        self.assertTrue(Event.objects.get(pk=self.event.pk).is_deleted)
        with self.assertRaises(NotFound):
            get_active_event(self.event.id)
        with self.assertRaises(NotFound):
            services.apply(self.carol, self.event.id, {
                "name": "Carol", "age": 40, "gender": "female", "phone": "555-0199",
            })
        self.assertTrue(
            Notification.objects.filter(user=self.alice, topic=Notification.TOPIC_EVENT_DELETED).exists()
        )

    def test_unknown_event(self):
        with self.assertRaises(NotFound):
            services.complete_event(self.organizer, 999999)


class UpdateEventTest(VolunlinkTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.make_registration(self.bob, EventRegistration.STATUS_PENDING)

    def test_partial_update_notifies_approved_volunteers(self):
        event = services.update_event(self.organizer, self.event.id, {
            "title": "  Beach   Clean-up  2 ",
            "location": "South Beach",
        })

        self.assertEqual(event.title, "Beach Clean-up 2")
        self.assertEqual(event.location, "South Beach")
        self.assertEqual(event.description, "Bring gloves")

        notes = Notification.objects.filter(topic=Notification.TOPIC_EVENT_UPDATED)
        self.assertEqual(list(notes.values_list("user_id", flat=True)), [self.alice.id])
        self.assertEqual(notes.get().payload["changes"], ["title", "location"])

    def test_no_change_is_silent(self):
        services.update_event(self.organizer, self.event.id, {"title": "Beach Clean-up"})
        self.assertFalse(Notification.objects.filter(topic=Notification.TOPIC_EVENT_UPDATED).exists())

    def test_capacity_cannot_drop_below_approved(self):
        self.make_registration(self.carol, EventRegistration.STATUS_APPROVED)

        with self.assertRaises(ValidationError):
            services.update_event(self.organizer, self.event.id, {"max_volunteers": 1})

        event = services.update_event(self.organizer, self.event.id, {"max_volunteers": 2})
        self.assertEqual(event.max_volunteers, 2)
        self.event.refresh_from_db()
        self.assertTrue(self.event.is_full)

    def test_raising_capacity_reopens_approvals(self):
        self.make_registration(self.carol, EventRegistration.STATUS_APPROVED)
        services.update_event(self.organizer, self.event.id, {"max_volunteers": 3})

        reg = services.approve(self.organizer, self.event.id, self.bob.id)
        self.assertEqual(reg.status, EventRegistration.STATUS_APPROVED)

    def test_schedule_is_validated_against_current_values(self):
        cases = {
            "past date": {"date": timezone.now() - timedelta(days=1)},
            "end before start": {"end_time": self.event.start_time - timedelta(hours=1)},
            "deadline after date": {"registration_deadline": self.event.date + timedelta(days=1)},
        }
        for label, data in cases.items():
            with self.subTest(label):
                with self.assertRaises(ValidationError):
                    services.update_event(self.organizer, self.event.id, data)

    def test_status_edits(self):
        event = services.update_event(self.organizer, self.event.id, {"status": Event.STATUS_CANCELLED})
        self.assertEqual(event.status, Event.STATUS_CANCELLED)
        self.assertNotIn(event, services.open_events())

        with self.assertRaises(ValidationError):
            services.update_event(self.organizer, self.event.id, {"status": Event.STATUS_COMPLETED})

    def test_completed_event_is_read_only(self):
        Event.objects.filter(pk=self.event.pk).update(status=Event.STATUS_COMPLETED)
        with self.assertRaises(InvalidState):
            services.update_event(self.organizer, self.event.id, {"title": "Renamed"})

    def test_only_managers(self):
        with self.assertRaises(Forbidden):
            services.update_event(self.other_organizer, self.event.id, {"title": "Mine now"})
        event = services.update_event(self.admin, self.event.id, {"title": "Admin edit"})
        self.assertEqual(event.title, "Admin edit")


class RejectEventTest(VolunlinkTestMixin, TestCase):
    def test_reject_removes_and_tells_organizer(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)

        event = services.reject_event(self.admin, self.event.id, "Missing safety plan")

        self.assertTrue(event.is_deleted)
        self.assertFalse(event.approved)
        with self.assertRaises(NotFound):
            get_active_event(self.event.id)

        note = Notification.objects.get(topic=Notification.TOPIC_EVENT_REJECTED)
        self.assertEqual(note.user, self.organizer)
        self.assertEqual(note.payload["reason"], "Missing safety plan")
        self.assertIn("Reason: Missing safety plan", note.payload["message"])
        self.assertTrue(
            Notification.objects.filter(user=self.alice, topic=Notification.TOPIC_EVENT_DELETED).exists()
        )

    def test_admin_only(self):
        with self.assertRaises(Forbidden):
            services.reject_event(self.organizer, self.event.id)

    def test_completed_event_cannot_be_rejected(self):
        self.complete()
        with self.assertRaises(InvalidState):
            services.reject_event(self.admin, self.event.id)

    def test_reason_length(self):
        with self.assertRaises(ValidationError):
            services.reject_event(self.admin, self.event.id, "x" * 301)


class QueryTest(VolunlinkTestMixin, TestCase):
    def test_open_events(self):
        past = self.make_event(title="Yesterday", date=timezone.now() - timedelta(days=1))
        unapproved = self.make_event(title="Pending review", approved=False)
        deleted = self.make_event(title="Gone", is_deleted=True)
        completed = self.make_event(title="Done", status=Event.STATUS_COMPLETED)

        listed = list(services.open_events())

        self.assertIn(self.event, listed)
        for hidden in (past, unapproved, deleted, completed):
            self.assertNotIn(hidden, listed)

    def test_events_for_organizer(self):
        mine = self.make_event(title="Mine too")
        self.make_event(title="Someone else's", organizer=self.other_organizer)

        self.assertEqual(set(services.events_for_organizer(self.organizer)), {self.event, mine})

    def test_events_for_volunteer(self):
        reg = self.make_registration(self.alice, EventRegistration.STATUS_PENDING)
        self.make_event(title="Not applied")

        events = list(services.events_for_volunteer(self.alice))

        self.assertEqual(events, [self.event])
        self.assertEqual(events[0].my_registrations, [reg])

    def test_completed_events_for_volunteer(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED, present=True)
        self.make_registration(self.bob, EventRegistration.STATUS_APPROVED)
        self.complete()

        self.assertEqual(list(services.completed_events_for_volunteer(self.alice)), [self.event])
        self.assertEqual(list(services.completed_events_for_volunteer(self.bob)), [])

    def test_registrations_for_event(self):
        self.make_registration(self.alice)
        self.make_registration(self.bob)

        event, registrations = services.registrations_for_event(self.organizer, self.event.id)

        self.assertEqual(event, self.event)
        self.assertEqual([r.volunteer for r in registrations], [self.alice, self.bob])
        with self.assertRaises(Forbidden):
            services.registrations_for_event(self.alice, self.event.id)

    def test_open_event_filters(self):
        park = self.make_event(
            title="Park Planting", description="Trees and shrubs", location="City Park",
            organizer=self.other_organizer, date=timezone.now() + timedelta(days=9),
        )

        def titles(**filters):
            return [e.title for e in services.open_events(filters)]

        self.assertEqual(titles(location="park"), ["Park Planting"])
        self.assertEqual(titles(search="shrubs"), ["Park Planting"])
        self.assertEqual(titles(search="clean"), ["Beach Clean-up"])
        self.assertEqual(titles(organizer=str(self.other_organizer.id)), ["Park Planting"])
        self.assertEqual(titles(date=park.date.date().isoformat()), ["Park Planting"])
        self.assertEqual(titles(), ["Beach Clean-up", "Park Planting"])

    def test_bad_filters(self):
        for filters in ({"date": "next week"}, {"status": "archived"}, {"organizer": "bob"}):
            with self.subTest(filters):
                with self.assertRaises(ValidationError):
                    list(services.open_events(filters))

    def test_visibility_by_role(self):
        own_draft = self.make_event(title="Own draft", approved=False)
        other_draft = self.make_event(title="Other draft", approved=False, organizer=self.other_organizer)
        done = self.make_event(title="Done", status=Event.STATUS_COMPLETED)

        self.assertEqual(set(services.visible_events(self.alice)), {self.event})
        self.assertEqual(set(services.visible_events(self.organizer)), {self.event, own_draft, done})
        self.assertEqual(
            set(services.visible_events(self.admin)), {self.event, own_draft, other_draft, done},
        )
        self.assertEqual(
            set(services.visible_events(self.admin, {"approved": "false"})), {own_draft, other_draft},
        )
        self.assertEqual(
            set(services.visible_events(self.organizer, {"status": Event.STATUS_COMPLETED})), {done},
        )

    def test_listings_carry_approved_total(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.make_registration(self.bob, EventRegistration.STATUS_PENDING)

        listed = services.open_events().get(pk=self.event.pk)
        self.assertEqual(listed.approved_total, 1)

        applied = list(services.events_for_volunteer(self.bob))
        # the volunteer join must not narrow the count to their own row
        self.assertEqual(applied[0].approved_total, 1)
