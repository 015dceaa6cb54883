from rest_framework.permissions import BasePermission

from core.exceptions import Forbidden


# ---- Helper functions -------------------------------------------------


def user_is_platform_admin(user) -> bool:
    """
    Platform-level admin flag based on user.role (or superuser).
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False

    if getattr(user, "is_superuser", False):
        return True

    return getattr(user, "role", None) == "admin"


def user_is_organizer(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return getattr(user, "role", None) == "organizer" or user_is_platform_admin(user)


def user_is_volunteer(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return getattr(user, "role", None) == "volunteer"


def user_can_manage_event(user, event) -> bool:
    """
    Who can manage registrations, attendance and ratings of an event?
    - the event's organizer
    - platform admins
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False

    if user_is_platform_admin(user):
        return True

    return getattr(event, "organizer_id", None) == user.id


def require_manager(user, event):
    if not user_can_manage_event(user, event):
        raise Forbidden("Only the event organizer or an admin can do this")


def require_organizer(user):
    if not user_is_organizer(user):
        raise Forbidden("Only organizers can create events")


def require_admin(user):
    if not user_is_platform_admin(user):
        raise Forbidden("Only admins can do this")


def require_volunteer(user):
    if not user_is_volunteer(user):
        raise Forbidden("Only volunteers can do this")


# ---- Permission classes -----------------------------------------------


class IsVolunteer(BasePermission):
    message = "Only volunteers can access this endpoint."

    def has_permission(self, request, view):
        return user_is_volunteer(request.user)
