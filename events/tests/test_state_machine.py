# events/tests/test_state_machine.py
from django.test import TestCase

from core.exceptions import Conflict, InvalidState
from events.models import EventRegistration
from events.state_machine import can_transition, ensure_transition, get_allowed_transitions, transition
from events.tests.helpers import VolunlinkTestMixin

PENDING = EventRegistration.STATUS_PENDING
APPROVED = EventRegistration.STATUS_APPROVED
REJECTED = EventRegistration.STATUS_REJECTED
CANCELLED = EventRegistration.STATUS_CANCELLED


class RegistrationStateMachineTest(VolunlinkTestMixin, TestCase):
    def registration(self, status):
        return EventRegistration(event=self.event, volunteer=self.alice, status=status)

    def test_allowed_transitions(self):
        allowed = [
            (PENDING, APPROVED),
            (PENDING, REJECTED),
            (PENDING, CANCELLED),
            (APPROVED, REJECTED),
            (APPROVED, CANCELLED),
            (REJECTED, APPROVED),
            (REJECTED, PENDING),
            (CANCELLED, PENDING),
        ]
        for current, new in allowed:
            with self.subTest(current=current, new=new):
                self.assertEqual(can_transition(self.registration(current), new), (True, ""))

    def test_refusals_carry_reasons(self):
        can, reason = can_transition(self.registration(CANCELLED), APPROVED)
        self.assertFalse(can)
        self.assertEqual(reason, "Cancelled registrations cannot be approved")

        can, reason = can_transition(self.registration(APPROVED), "finished")
        self.assertFalse(can)
        self.assertIn("Invalid status", reason)

    def test_duplicate_application_is_a_conflict(self):
        with self.assertRaises(Conflict):
            ensure_transition(self.registration(PENDING), PENDING)
        with self.assertRaises(Conflict):
            ensure_transition(self.registration(APPROVED), PENDING)

    def test_other_refusals_are_invalid_state(self):
        with self.assertRaises(InvalidState) as ctx:
            ensure_transition(self.registration(REJECTED), CANCELLED)
        self.assertNotIsInstance(ctx.exception, Conflict)
        self.assertEqual(ctx.exception.message, "Rejected registrations cannot be cancelled")

    def test_transition_returns_previous_status(self):
        registration = self.registration(PENDING)
        self.assertEqual(transition(registration, APPROVED, actor=self.organizer), PENDING)
        self.assertEqual(registration.status, APPROVED)

    def test_failed_transition_leaves_status(self):
        registration = self.registration(CANCELLED)
        with self.assertRaises(InvalidState):
            transition(registration, REJECTED)
        self.assertEqual(registration.status, CANCELLED)

    def test_get_allowed_transitions(self):
        self.assertEqual(get_allowed_transitions(self.registration(CANCELLED)), [PENDING])
