"""Activity models: per-user notifications."""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_MESSAGE = "message"
    TYPE_CHALLENGE = "challenge"
    TYPE_COMMUNITY = "community"
    TYPE_ACCOUNT = "account"
    TYPE_SYSTEM = "system"
    TYPE_CHOICES = (
        (TYPE_MESSAGE, "Message"),
        (TYPE_CHALLENGE, "Challenge"),
        (TYPE_COMMUNITY, "Community"),
        (TYPE_ACCOUNT, "Account"),
        (TYPE_SYSTEM, "System"),
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="notifications_actor")
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SYSTEM)
    title = models.CharField(max_length=120)
    message = models.CharField(max_length=500)
    link = models.CharField(max_length=300, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    read = models.BooleanField(default=False, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id}:{self.type}:{self.title[:20]}"
