"""Accounts views: current user identity and the pending-approval queue."""
from __future__ import annotations

from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.http import HttpRequest, JsonResponse

from .decorators import role_required
from .identity import identity_for
from .models import ApprovalStatus, Role


@login_required
def me(request: HttpRequest) -> JsonResponse:
    """Identity and progress of the signed-in user."""
    user = User.objects.select_related("profile").get(pk=request.user.pk)
    profile = getattr(user, "profile", None)
    data = identity_for(user).as_dict()
    data.update(
        {
            "email": user.email,
            "bio": getattr(profile, "bio", ""),
            "points": getattr(profile, "points", 0),
            "experience_points": getattr(profile, "experience_points", 0),
            "level": getattr(profile, "level", 1),
            "streak_days": getattr(profile, "streak_days", 0),
            "approval_status": getattr(profile, "approval_status", None),
        }
    )
    return JsonResponse(data)


@role_required(Role.ADMIN)
def pending_accounts(request: HttpRequest) -> JsonResponse:
    """Admin-only list of accounts awaiting approval, oldest first."""
    users = (
        User.objects.select_related("profile")
        .filter(profile__approval_status=ApprovalStatus.PENDING)
        .order_by("date_joined", "id")[:100]
    )
    results = []
    for u in users:
        row = identity_for(u).as_dict()
        row.update({"email": u.email, "date_joined": u.date_joined.isoformat()})
        results.append(row)
    return JsonResponse({"count": len(results), "results": results})
