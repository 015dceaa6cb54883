from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from notifications.models import Notification


class Command(BaseCommand):
    help = "Deletes read notifications older than the given number of days"

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=30)

    def handle(self, *args, **options):
        days = options["days"]
        cutoff = timezone.now() - timedelta(days=days)

        deleted, _ = Notification.objects.filter(is_read=True, created_at__lt=cutoff).delete()

        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} read notifications older than {days} days"))
