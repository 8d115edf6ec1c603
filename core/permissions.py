"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission

from core.models import User

CLINICAL_ROLES = {User.ROLE_DOCTOR, User.ROLE_CLINIC_USER}


def is_clinical(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, 'role', None) in CLINICAL_ROLES)


class IsClinicalStaff(BasePermission):
    """Doctors and clinic users."""
    message = 'Insufficient permissions'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_clinical(getattr(request, 'user', None))


class IsMotherRole(BasePermission):
    message = 'Insufficient permissions'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, 'user', None)
        return bool(user and user.is_authenticated and getattr(user, 'role', None) == User.ROLE_MOTHER)


class IsClinicUser(BasePermission):
    message = 'Insufficient permissions'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, 'user', None)
        return bool(user and user.is_authenticated and getattr(user, 'role', None) == User.ROLE_CLINIC_USER)

