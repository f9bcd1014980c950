from __future__ import annotations

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_POST

from .models import Notification
from .services import mark_all_read, mark_notification_read


@login_required
def notifications_recent(request: HttpRequest) -> JsonResponse:
    """Return recent notifications and unread count for the current user."""
    try:
        limit = int(request.GET.get("limit", 10))
    except (TypeError, ValueError):
        limit = 10
    limit = max(1, min(limit, 50))
    qs = Notification.objects.filter(user=request.user).order_by("-created_at", "-id")
    unread = qs.filter(read=False).count()
    data = [
        {
            "id": n.id,
            "type": n.type,
            "title": n.title,
            "message": n.message,
            "link": n.link,
            "created_at": n.created_at.isoformat(),
            "read": n.read,
        }
        for n in qs[:limit]
    ]
    return JsonResponse({"unread": unread, "results": data})


@login_required
@require_POST
def notification_mark_read(request: HttpRequest, pk: int) -> JsonResponse:
    result = mark_notification_read(pk, request.user.id)
    return JsonResponse(result.as_payload(), status=result.http_status())


@login_required
@require_POST
def notifications_mark_all_read(request: HttpRequest) -> JsonResponse:
    result = mark_all_read(request.user.id)
    return JsonResponse(result.as_payload(), status=result.http_status())
