# events/certificate_generator.py

import logging
import os
import uuid
from io import BytesIO

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils.formats import date_format
from django.utils.module_loading import import_string

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors

logger = logging.getLogger("volunlink.events")

ACCENT_COLOR = colors.HexColor("#2c3e50")


def _wrap_centred(p, text, width, y, font, size, max_width, leading):
    """
    Draw text centred on the page, wrapped on word boundaries.
    Returns the y below the last drawn line.
    """
    words = text.split()
    line = ""
    for word in words:
        candidate = f"{line} {word}".strip()
        if p.stringWidth(candidate, font, size) <= max_width or not line:
            line = candidate
            continue
        p.drawCentredString(width / 2.0, y, line)
        y -= leading
        line = word
    if line:
        p.drawCentredString(width / 2.0, y, line)
        y -= leading
    return y


def build_certificate_pdf(volunteer_name, event_title, hours_text, issue_date) -> bytes:
    """
    Render a single-page A4 certificate of participation and return the bytes.
    """
    buffer = BytesIO()

    page_size = A4
    p = canvas.Canvas(buffer, pagesize=page_size)
    width, height = page_size
    organization = settings.ORGANIZATION_NAME

    p.setTitle(f"Certificate - {volunteer_name}")

    # ---------- Border ----------
    p.setStrokeColor(ACCENT_COLOR)
    p.setLineWidth(4)
    margin = 30
    p.rect(margin, margin, width - 2 * margin, height - 2 * margin, stroke=1, fill=0)

    # ---------- Title ----------
    p.setFillColor(ACCENT_COLOR)
    p.setFont("Helvetica-Bold", 28)
    p.drawCentredString(width / 2.0, height - 140, "Certificate of Participation")

    # ---------- Body text ----------
    p.setFillColor(colors.black)
    p.setFont("Helvetica", 14)
    p.drawCentredString(width / 2.0, height - 210, "This is to certify that")

    p.setFont("Helvetica-Bold", 24)
    p.drawCentredString(width / 2.0, height - 255, volunteer_name)

    body = (
        f"has successfully participated in \"{event_title}\" organized by "
        f"{organization} and contributed {hours_text} of community service."
    )
    _wrap_centred(
        p,
        body,
        width,
        height - 300,
        font="Helvetica",
        size=14,
        max_width=width - 2 * margin - 80,
        leading=22,
    )

    # ---------- Footer ----------
    p.setFont("Helvetica", 12)
    p.drawString(margin + 40, 140, f"Date: {date_format(issue_date, 'SHORT_DATE_FORMAT')}")

    p.line(width - margin - 220, 150, width - margin - 40, 150)
    p.drawCentredString(width - margin - 130, 132, "Organizer Signature")

    p.setFont("Helvetica-Oblique", 10)
    p.drawCentredString(width / 2.0, margin + 20, f"Issued by {organization}")

    p.showPage()
    p.save()

    buffer.seek(0)
    return buffer.getvalue()


def render_certificate(volunteer_name, event_title, hours_text, issue_date) -> str:
    """
    Generate the certificate PDF and save it using Django's default storage.

    Returns the public URL of the stored document. Compatible with any
    storage backend that implements save() and url().
    """
    pdf_bytes = build_certificate_pdf(volunteer_name, event_title, hours_text, issue_date)

    filename = os.path.join("certificates", f"certificate_{uuid.uuid4().hex}.pdf").replace("\\", "/")
    saved_path = default_storage.save(filename, ContentFile(pdf_bytes))

    logger.info(f"Certificate rendered for {volunteer_name!r}: {saved_path}")
    return default_storage.url(saved_path)


def get_renderer():
    """The configured renderer, resolved on each call so settings overrides apply."""
    return import_string(settings.CERTIFICATE_RENDERER)
