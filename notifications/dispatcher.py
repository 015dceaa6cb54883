# notifications/dispatcher.py
"""
Fire-and-forget notification publishing.

Callers publish after their state change is committed; a failing
backend is logged and never propagates back into the caller.
"""
import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger("volunlink.notifications")


def get_backend():
    return import_string(settings.NOTIFICATION_BACKEND)()


def publish(user_id, topic, payload):
    """
    Deliver one notification. Returns True when the backend accepted it.
    """
    if not user_id:
        return False

    try:
        get_backend().send(user_id, topic, dict(payload or {}))
    except Exception as e:
        logger.warning(f"Notification {topic} to user={user_id} failed: {e}")
        return False

    logger.debug(f"Notification {topic} delivered to user={user_id}")
    return True


def publish_many(user_ids, topic, payload):
    """Publish the same payload to several users, skipping duplicates."""
    sent = 0
    seen = set()
    for user_id in user_ids:
        if not user_id or user_id in seen:
            continue
        seen.add(user_id)
        if publish(user_id, topic, payload):
            sent += 1
    return sent
