"""Custom permissions for REST API v1."""
from __future__ import annotations

from rest_framework.permissions import BasePermission, SAFE_METHODS


def _profile(user):
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "profile", None)


class IsAuthenticatedOrReadOnly(BasePermission):
    def has_permission(self, request, view):  # noqa: D401
        return bool(request.method in SAFE_METHODS or (request.user and request.user.is_authenticated))


class IsAdminRole(BasePermission):
    def has_permission(self, request, view):
        profile = _profile(request.user)
        return bool(profile is not None and profile.is_admin)


class IsAuthorOrReadOnly(BasePermission):
    """Object-level: only the author may modify a post."""

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and obj.author_id == request.user.id)
