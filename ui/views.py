import os
import platform

import django
import rest_framework
from django.http import HttpRequest, JsonResponse


def _admin_mode(request: HttpRequest) -> bool:
    """Return True when Admin Mode is active.

    Admin Mode is on for staff users or when explicitly enabled via the
    `ADMIN_MODE` environment variable; it adds runtime details to the index.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_staff:
        return True
    return str(os.environ.get("ADMIN_MODE", "")).strip().lower() in {"1", "true", "yes", "on"}


def _run_info() -> dict:
    """Basic runtime information for quick diagnostics."""
    return {
        "os": f"{platform.system()} {platform.release()}",
        "python": platform.python_version(),
        "django": django.get_version(),
        "drf": getattr(rest_framework, "__version__", None),
    }


def index(request: HttpRequest) -> JsonResponse:
    """Public landing document with links to the API surface."""
    admin_mode = _admin_mode(request)
    return JsonResponse(
        {
            "app_name": "EnglishMastery",
            "tagline": "Practise English with daily video challenges, conversations and community feedback.",
            "links": {
                "api": "/api/v1/",
                "schema": "/api/schema/",
                "docs": "/docs/",
                "websocket": "/ws/conversations/<id>/",
            },
            "admin_mode": admin_mode,
            "runinfo": _run_info() if admin_mode else None,
        }
    )
