# events/tests/test_certificates.py
import os

from django.test import TestCase
from django.utils import timezone

from events import services
from events.certificate_generator import build_certificate_pdf, render_certificate
from events.models import EventRegistration
from events.tests.helpers import VolunlinkTestMixin
from volunteers.models import Certificate


class CertificatePdfTest(VolunlinkTestMixin, TestCase):
    def test_build_returns_pdf_bytes(self):
        pdf = build_certificate_pdf(
            "Alice Smith",
            "A very long event title that certainly needs wrapping across more than one line of text",
            "3.00 hours",
            timezone.now(),
        )
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 500)

    def test_render_saves_to_media(self):
        url = render_certificate("Alice Smith", "Beach Clean-up", "3.00 hours", timezone.now())

        self.assertTrue(url.startswith("/media/certificates/certificate_"))
        self.assertTrue(url.endswith(".pdf"))
        relative = url[len("/media/"):]
        self.assertTrue(os.path.exists(os.path.join(self.temp_media, relative)))

    def test_finalize_with_reportlab(self):
        self.make_registration(self.alice, EventRegistration.STATUS_APPROVED)
        self.complete()
        services.mark_attendance(self.organizer, self.event.id, self.alice.id, True, "3 hours")

        result = services.finalize(self.organizer, self.event.id)

        self.assertTrue(result.locked)
        cert = Certificate.objects.get(event=self.event, volunteer=self.alice)
        self.assertEqual(len(cert.credential_id), 12)
        relative = cert.document_url[len("/media/"):]
        with open(os.path.join(self.temp_media, relative), "rb") as fh:
            self.assertTrue(fh.read(4) == b"%PDF")
