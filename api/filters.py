"""
Role-scoped filters
"""
from rest_framework import filters


class OwnerFilterBackend(filters.BaseFilterBackend):
    """
    Admins see every row, other users only rows they own.
    The owning field is read from view.owner_field (default 'user').
    """

    def filter_queryset(self, request, queryset, view):
        user = request.user
        if not (user and user.is_authenticated):
            return queryset.none()
        if getattr(user, 'is_admin', False):
            return queryset
        owner_field = getattr(view, 'owner_field', 'user')
        return queryset.filter(**{owner_field: user})
