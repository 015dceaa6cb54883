# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Local mirror of an identity issued elsewhere.

    Only the role matters to the volunteering workflow; profile data lives
    with the identity provider.
    """
    ROLE_VOLUNTEER = "volunteer"
    ROLE_ORGANIZER = "organizer"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = (
        (ROLE_VOLUNTEER, "Volunteer"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_ADMIN, "Admin"),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_VOLUNTEER,
    )

    phone = models.CharField(max_length=20, blank=True, null=True)

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def is_volunteer(self):
        return self.role == self.ROLE_VOLUNTEER

    @property
    def is_platform_admin(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def __str__(self):
        return self.username
