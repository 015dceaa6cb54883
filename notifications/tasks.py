# notifications/tasks.py
import logging

from celery import shared_task

from .emails import send_notification_email
from .models import Notification

logger = logging.getLogger("volunlink.notifications")


@shared_task
def send_notification_email_task(notification_id: int):
    """
    Async wrapper for emailing a notification.
    """
    try:
        notification = Notification.objects.select_related("user").get(id=notification_id)
    except Notification.DoesNotExist:
        return

    try:
        send_notification_email(notification)
    except Exception as e:
        # Avoid crashing worker if email fails
        logger.warning(f"Notification email {notification_id} failed: {e}")
        return
