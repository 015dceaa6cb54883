from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from events.models import Event
from events.services import apply, approve

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds the database with an admin, an organizer, two volunteers and a sample event"

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password", help="Password for the seeded users")

    def _user(self, username, role, password, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": f"{username}@example.com", "role": role, **extra},
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(f"Created {role}: {username}")
        return user

    def handle(self, *args, **options):
        self.stdout.write("Seeding data...")
        password = options["password"]

        # 1. Ensure Users
        self._user("admin", User.ROLE_ADMIN, password, is_staff=True, is_superuser=True)
        organizer = self._user("organizer", User.ROLE_ORGANIZER, password, first_name="Olivia")
        alice = self._user("alice", User.ROLE_VOLUNTEER, password, first_name="Alice")
        bob = self._user("bob", User.ROLE_VOLUNTEER, password, first_name="Bob")

        # 2. Create Event
        start = timezone.now() + timedelta(days=7)
        event, created = Event.objects.get_or_create(
            title="Riverside Clean-up",
            organizer=organizer,
            defaults={
                "description": "Help us clear litter along the river path. Gloves and bags provided.",
                "location": "Riverside Park, North Gate",
                "date": start,
                "start_time": start,
                "end_time": start + timedelta(hours=3),
                "registration_deadline": start - timedelta(days=1),
                "max_volunteers": 10,
                "approved": True,
            },
        )
        if not created:
            self.stdout.write(self.style.WARNING("Sample event already exists, skipping registrations"))
            return

        # 3. Registrations go through the services so counters stay consistent
        for volunteer, age in [(alice, 24), (bob, 31)]:
            apply(volunteer, event.id, {
                "name": volunteer.display_name,
                "age": age,
                "gender": "prefer-not-to-say",
                "phone": "555-0100",
            })
        approve(organizer, event.id, alice.id)

        self.stdout.write(self.style.SUCCESS(f"Seeded event #{event.id}: {event.title}"))
