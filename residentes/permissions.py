"""
Custom permission classes for user type based access control.
"""
from rest_framework.permissions import BasePermission

class IsResident(BasePermission):
    """Allow access only to resident accounts (students are read-only elsewhere)."""
    message = 'Esta función está disponible solo para residentes'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "user_type", None) == "resident")

class IsModerator(BasePermission):
    """Staff members moderate reviews."""
    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))
