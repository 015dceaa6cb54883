# events/sanitizers.py
"""
Input sanitization and validation for Volunlink.

All user-generated content should pass through these functions
before being stored. Failures raise core.exceptions.ValidationError
so the API renders them as 400s.
"""
import re
from typing import Optional

from django.conf import settings

from core.exceptions import ValidationError

from .models import Event, EventRegistration


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    text = str(text)
    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_title(title: Optional[str]) -> str:
    """
    - Max 200 characters
    - Single line (no newlines)
    """
    text = sanitize_text(title, max_length=200)
    text = re.sub(r'[\r\n]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text


# ─────────────────────────────────────────────────────────────
# Validators
# ─────────────────────────────────────────────────────────────

def validate_capacity(value) -> int:
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("max_volunteers must be a valid integer")

    if capacity < 1:
        raise ValidationError("max_volunteers must be at least 1")
    if capacity > Event.MAX_VOLUNTEERS_LIMIT:
        raise ValidationError(f"max_volunteers cannot exceed {Event.MAX_VOLUNTEERS_LIMIT}")
    return capacity


def validate_applicant(applicant) -> dict:
    """
    Validate the applicant snapshot sent with an application.
    Returns a cleaned dict with name, age, gender and phone.
    """
    if not isinstance(applicant, dict):
        raise ValidationError("Applicant details are required")

    name = sanitize_text(applicant.get("name"))
    if not name:
        raise ValidationError("Name is required")
    if len(name) > 100:
        raise ValidationError("Name cannot exceed 100 characters")

    raw_age = applicant.get("age")
    if isinstance(raw_age, int) and not isinstance(raw_age, bool):
        age = raw_age
    elif isinstance(raw_age, str) and raw_age.strip().isdigit():
        age = int(raw_age.strip())
    else:
        raise ValidationError("Age must be a whole number")
    if age < 1 or age > 120:
        raise ValidationError("Age must be between 1 and 120")

    gender = sanitize_text(applicant.get("gender"))
    if gender not in dict(EventRegistration.GENDER_CHOICES):
        raise ValidationError("Gender must be one of: male, female, other, prefer-not-to-say")

    phone = sanitize_text(applicant.get("phone"))
    if not phone:
        raise ValidationError("Phone is required")
    if len(phone) > 20:
        raise ValidationError("Phone cannot exceed 20 characters")

    return {"name": name, "age": age, "gender": gender, "phone": phone}


def validate_rating(value) -> int:
    """Ratings are whole numbers 1..5; booleans and floats are refused."""
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value.strip())
        else:
            raise ValidationError("Rating must be a whole number between 1 and 5")
    if value < 1 or value > 5:
        raise ValidationError("Rating must be a whole number between 1 and 5")
    return value


def validate_cancellation_reason(reason) -> str:
    text = sanitize_text(reason)
    min_length = settings.CANCELLATION_REASON_MIN_LENGTH
    if len(text) < min_length:
        raise ValidationError(f"Cancellation reason must be at least {min_length} characters")
    if len(text) > 500:
        raise ValidationError("Cancellation reason cannot exceed 500 characters")
    return text


def validate_rejection_reason(reason) -> str:
    text = sanitize_text(reason)
    if len(text) > 300:
        raise ValidationError("Rejection reason cannot exceed 300 characters")
    return text


def validate_feedback_text(text) -> str:
    cleaned = sanitize_text(text)
    if len(cleaned) > 1000:
        raise ValidationError("Feedback cannot exceed 1000 characters")
    return cleaned


def validate_work_duration(text) -> str:
    cleaned = sanitize_text(text)
    if len(cleaned) > 100:
        raise ValidationError("Work duration cannot exceed 100 characters")
    return cleaned
