"""Role-based access decorators for function views."""
from __future__ import annotations

from functools import wraps
from django.core.exceptions import PermissionDenied
from django.http import HttpRequest


def user_role(user) -> str | None:
    """Return the profile role of an authenticated user, else None."""
    if not getattr(user, "is_authenticated", False):
        return None
    return getattr(getattr(user, "profile", None), "role", None)


def role_required(*roles: str):
    """Require the current user to hold one of the given roles.

    Unauthenticated users and users without a profile are rejected with
    `PermissionDenied` (403), not redirected.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request: HttpRequest, *args, **kwargs):
            if user_role(getattr(request, "user", None)) not in roles:
                raise PermissionDenied
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator
