# events/locks.py
"""
Per-event serialization.

Every mutation of an event (registrations, attendance, finalization,
ratings) runs inside locked_event(). Threads of one worker queue on a
process-wide mutex keyed by event id; separate worker processes queue
on the row lock taken by select_for_update().
"""
from contextlib import contextmanager
import logging
import threading

from django.db import transaction

from core.exceptions import NotFound

from .models import Event

logger = logging.getLogger("volunlink.events")

_registry_lock = threading.Lock()
# event_id -> [lock, holders]
_event_locks = {}


@contextmanager
def event_lock(event_id):
    """
    Process-wide reentrant mutex for one event id.
    Entries are reference counted and dropped once nobody holds or waits.
    """
    key = int(event_id)
    with _registry_lock:
        entry = _event_locks.get(key)
        if entry is None:
            entry = [threading.RLock(), 0]
            _event_locks[key] = entry
        entry[1] += 1

    lock = entry[0]
    lock.acquire()
    try:
        yield
    finally:
        lock.release()
        with _registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                _event_locks.pop(key, None)


@contextmanager
def locked_event(event_id):
    """
    Yield the Event row locked for update inside one transaction.
    Deleted or missing events raise NotFound.
    """
    try:
        key = int(event_id)
    except (TypeError, ValueError):
        raise NotFound("Event not found")

    with event_lock(key):
        with transaction.atomic():
            try:
                event = Event.objects.select_for_update().get(pk=key, is_deleted=False)
            except Event.DoesNotExist:
                raise NotFound("Event not found")
            yield event


def get_active_event(event_id) -> Event:
    """Unlocked read of a non-deleted event."""
    try:
        return Event.objects.active().get(pk=int(event_id))
    except (Event.DoesNotExist, TypeError, ValueError):
        raise NotFound("Event not found")
