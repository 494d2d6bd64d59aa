"""
Role permissions - admins manage everything, tenants only their own records
"""
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Permission to only allow admin users.
    """
    message = 'Not authorized as an admin'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'is_admin', False))


class IsSuperAdmin(IsAdmin):
    message = 'Only super admin can perform this action'

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_super_admin


class IsNotBlocked(permissions.BasePermission):
    """Blocked accounts keep their token but cannot use the API"""
    message = 'User has been blocked by the admin'

    def has_permission(self, request, view):
        user = request.user
        return not (user and user.is_authenticated and getattr(user, 'is_blocked', False))


class IsAdminOrOwner(permissions.BasePermission):
    """
    Admins see any object, other users only objects they own.
    The owning field is read from view.owner_field (default 'user').
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if getattr(request.user, 'is_admin', False):
            return True
        owner_field = getattr(view, 'owner_field', 'user')
        return getattr(obj, f'{owner_field}_id', None) == request.user.id
