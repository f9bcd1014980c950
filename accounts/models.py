"""Accounts models: user profile, roles and moderation state.

Defines a `UserProfile` associated one-to-one with Django's `User`. The
auth user keeps identity (email, `is_active`); the profile carries the
role, the public display fields, learning progress counters and the
admin approval state. The profile is created automatically on user
creation.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    """Platform roles used for role-based guards."""

    MEMBER = "member", "Member"
    TEACHER = "teacher", "Teacher"
    ADMIN = "admin", "Admin"


class ApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class UserProfile(models.Model):
    """Profile linked to a Django auth user.

    - `role`: authorisation gate for views and API permissions
    - `full_name` / `username` / `avatar_url`: display identity; see
      `accounts.identity` for how a name is picked
    - `points` / `experience_points` / `level` / `streak_days`: progress
    - `approval_status`: set by admins; rejection also deactivates the user
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.MEMBER)

    full_name = models.CharField(max_length=200, blank=True)
    username = models.CharField(max_length=150, blank=True)
    avatar_url = models.URLField(blank=True)
    bio = models.TextField(blank=True)

    points = models.PositiveIntegerField(default=0)
    experience_points = models.PositiveIntegerField(default=0)
    level = models.PositiveSmallIntegerField(default=1)
    streak_days = models.PositiveIntegerField(default=0)
    last_active = models.DateTimeField(null=True, blank=True)

    approval_status = models.CharField(
        max_length=16, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING, db_index=True
    )
    approval_reason = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.user_id}:{self.role}>"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
