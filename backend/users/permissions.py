from rest_framework import permissions


def _is_portal_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_portal_admin", False))


class IsAdmin(permissions.BasePermission):
    message = "No tienes permisos de administración del portal."

    def has_permission(self, request, view):
        return _is_portal_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Public read access; writes only for portal administrators.
    """

    message = "No tienes permisos de administración del portal."

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return _is_portal_admin(request.user)
