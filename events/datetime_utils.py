# events/datetime_utils.py
"""
Centralized datetime and duration handling for Volunlink.

All "now" lookups go through here so tests and services agree on
one clock.
"""
from datetime import datetime
from typing import Optional
import re

from django.utils import timezone

# First decimal number in free text: "3 hours", "about 2.5 hrs", "4h"
_LEADING_NUMBER = re.compile(r"([0-9]+(\.[0-9]+)?)")


def now() -> datetime:
    """
    Get current datetime (timezone-aware when USE_TZ=True).
    """
    return timezone.now()


def has_passed(dt: Optional[datetime]) -> bool:
    if dt is None:
        return False
    return dt < now()


def is_registration_open(event) -> bool:
    """
    Registration is open if:
    - the event is approved and still upcoming
    - its date hasn't passed
    - its registration deadline (if any) hasn't passed
    """
    from .models import Event

    if not event.approved or event.status != Event.STATUS_UPCOMING:
        return False
    if has_passed(event.date):
        return False
    if has_passed(event.registration_deadline):
        return False
    return True


def parse_work_duration(text: Optional[str]) -> Optional[float]:
    """
    Parse hours out of an organizer-entered work duration.

    Returns the first decimal number in the text when it is positive,
    None when nothing usable was found.
    """
    if not text:
        return None
    match = _LEADING_NUMBER.search(text)
    if not match:
        return None
    try:
        hours = float(match.group(1))
    except ValueError:
        return None
    return hours if hours > 0 else None


def credited_hours_for(registration, event) -> float:
    """Hours to credit: parsed work duration, else the scheduled duration."""
    parsed = parse_work_duration(registration.work_duration)
    if parsed is not None:
        return parsed
    return max(0.0, event.scheduled_duration_hours())


def format_hours(hours: float) -> str:
    return f"{hours:.2f} hours"

