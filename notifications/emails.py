# notifications/emails.py
from django.conf import settings
from django.core.mail import send_mail


def send_notification_email(notification):
    """
    Send a plain-text copy of an inbox notification to its recipient.
    Returns False when the user has no email address.
    """
    user = notification.user

    if not getattr(user, "email", None):
        # No email set, nothing to send
        return False

    greeting_name = user.get_full_name() or user.username

    message = (
        f"Hi {greeting_name},\n\n"
        f"{notification.body}\n\n"
        f"Thank you,\n"
        f"{settings.ORGANIZATION_NAME}"
    )

    send_mail(
        subject=notification.title,
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )
    return True
