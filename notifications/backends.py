# notifications/backends.py
"""
Delivery backends for the notification dispatcher.

The backend is chosen by settings.NOTIFICATION_BACKEND. Realtime
transports (sockets, push) plug in by subclassing BaseBackend.
"""
import logging

from django.conf import settings

from .models import Notification

logger = logging.getLogger("volunlink.notifications")


TOPIC_TITLES = {
    Notification.TOPIC_REGISTRATION_UPDATED: "Registration update",
    Notification.TOPIC_ATTENDANCE_UPDATED: "Attendance update",
    Notification.TOPIC_CERTIFICATE_READY: "Your certificate is ready",
    Notification.TOPIC_RATING_UPDATED: "You received a rating",
    Notification.TOPIC_FEEDBACK_SUBMITTED: "Feedback submitted",
    Notification.TOPIC_EVENT_COMPLETED: "Event completed",
    Notification.TOPIC_EVENT_DELETED: "Event removed",
    Notification.TOPIC_EVENT_UPDATED: "Event updated",
    Notification.TOPIC_EVENT_REJECTED: "Event not approved",
}


class BaseBackend:
    def send(self, user_id, topic, payload):
        raise NotImplementedError


class DatabaseBackend(BaseBackend):
    """
    Persist an inbox row per notification and, for configured topics,
    queue an email copy through celery.
    """

    def send(self, user_id, topic, payload):
        title = TOPIC_TITLES.get(topic, topic)
        event_title = payload.get("event_title")
        if event_title:
            title = f"{title}: {event_title}"

        notification = Notification.objects.create(
            user_id=user_id,
            topic=topic,
            title=title[:255],
            body=payload.get("message") or payload.get("label") or "",
            payload=payload,
            event_id=payload.get("event_id"),
        )

        if topic in settings.NOTIFICATION_EMAIL_TOPICS:
            try:
                from .tasks import send_notification_email_task
                send_notification_email_task.delay(notification.id)
            except Exception as e:
                # inbox row is already stored; email is best-effort
                logger.warning(f"Could not queue email for notification {notification.id}: {e}")

        return notification


class NullBackend(BaseBackend):
    """Drops everything. Handy for shells and data migrations."""

    def send(self, user_id, topic, payload):
        return None
