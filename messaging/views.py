from __future__ import annotations

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from . import services


@login_required
@require_GET
def inbox(request: HttpRequest) -> JsonResponse:
    """Conversation summaries for the current user plus their total unread count."""
    result = services.list_conversations(request.user.id)
    if not result.ok:
        return JsonResponse(result.as_payload(), status=result.http_status())
    total = sum(s.unread_count for s in result.data)
    return JsonResponse({"total_unread": total, "results": [s.as_dict() for s in result.data]})


@login_required
@require_GET
def conversation_history(request: HttpRequest, conversation_id: int) -> JsonResponse:
    """Return a page of messages for a conversation (participants only)."""
    result = services.fetch_messages(
        conversation_id,
        request.user.id,
        limit=request.GET.get("limit"),
        offset=request.GET.get("offset") or 0,
    )
    if not result.ok:
        return JsonResponse(result.as_payload(), status=result.http_status())
    page = result.data.as_dict()
    # Oldest first for rendering
    page["messages"].reverse()
    return JsonResponse(page)
