"""Challenge model.

A challenge wraps one video the learner responds to. `daily` and
`practice` challenges are produced by the scheduled refresh and belong to
nobody; `user_generated` challenges have a creator who alone may delete
them.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Difficulty(models.TextChoices):
    BEGINNER = "beginner", "Beginner"
    INTERMEDIATE = "intermediate", "Intermediate"
    ADVANCED = "advanced", "Advanced"


class ChallengeType(models.TextChoices):
    DAILY = "daily", "Daily"
    PRACTICE = "practice", "Practice"
    USER_GENERATED = "user_generated", "User generated"


class Challenge(models.Model):
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    video_id = models.CharField(max_length=32, blank=True, db_index=True)
    video_url = models.URLField(max_length=500)
    embed_url = models.URLField(max_length=500, blank=True)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    difficulty = models.CharField(max_length=16, choices=Difficulty.choices, default=Difficulty.BEGINNER, db_index=True)
    duration = models.PositiveIntegerField(default=0, help_text="Seconds")
    challenge_type = models.CharField(max_length=20, choices=ChallengeType.choices, db_index=True)
    topics = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    featured = models.BooleanField(default=False)
    challenge_date = models.DateField(null=True, blank=True, db_index=True)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="challenges"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.challenge_type}:{self.title}"

    @property
    def is_user_generated(self) -> bool:
        return self.challenge_type == ChallengeType.USER_GENERATED
