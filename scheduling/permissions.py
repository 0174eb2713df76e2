"""
Position based permission classes.

A user's position comes from their :class:`~scheduling.models.UserProfile`.
Users without a profile are treated as having no position and are
refused by every class here.
"""
from rest_framework.permissions import BasePermission

NURSE = "nurse"
DOCTOR = "doctor"


def get_profile(user):
    """Return the user's clinic profile or ``None``."""
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "profile", None)


def position_of(user) -> str | None:
    profile = get_profile(user)
    if profile is None:
        return None
    return (profile.position or "").strip() or None


class HasProfile(BasePermission):
    """Any authenticated user with a nurse or doctor profile."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return position_of(getattr(request, "user", None)) in {NURSE, DOCTOR}


class IsNurse(BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return position_of(getattr(request, "user", None)) == NURSE


class IsDoctor(BasePermission):
    """Doctors linked to a doctor record."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if position_of(user) != DOCTOR:
            return False
        return bool(get_profile(user).doctor_id)
