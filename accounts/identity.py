"""Display identity for users.

Every place that shows a user (conversation participants, post authors,
comment authors, notifications) resolves the name through
`resolve_display_name` so the fallback order stays the same everywhere.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist


def resolve_display_name(full_name: Optional[str], username: Optional[str], email: Optional[str]) -> str:
    """Pick the first non-blank of full name, username, e-mail."""
    for candidate in (full_name, username, email):
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


def default_avatar_url(user_id, size: int = 96) -> str:
    """Deterministic DiceBear avatar seeded from the user id (no PII)."""
    seed = hashlib.sha256(f"user:{user_id}".encode()).hexdigest()[:16]
    base = getattr(settings, "AVATAR_BASE_URL", "https://api.dicebear.com/7.x").rstrip("/")
    style = getattr(settings, "AVATAR_STYLE", "initials")
    return f"{base}/{style}/svg?{urlencode({'seed': seed, 'size': size})}"


@dataclass(frozen=True)
class UserIdentity:
    user_id: int
    display_name: str
    avatar_url: str
    role: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "role": self.role,
        }


def identity_for(user) -> UserIdentity:
    """Build a `UserIdentity` for a user; a missing profile is not an error.

    Callers should `select_related("profile")` to keep this query-free.
    """
    try:
        profile = user.profile
    except ObjectDoesNotExist:
        profile = None
    name = resolve_display_name(
        getattr(profile, "full_name", None),
        getattr(profile, "username", None),
        user.email,
    )
    avatar = getattr(profile, "avatar_url", "") or default_avatar_url(user.pk)
    return UserIdentity(
        user_id=user.pk,
        display_name=name or f"User {user.pk}",
        avatar_url=avatar,
        role=getattr(profile, "role", None),
    )
