# users/permissions.py

from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """
    Storefront admin:
    - role == "admin", OR
    - Django staff flag (set for superusers created via createsuperuser)
    """

    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))
