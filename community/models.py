"""Community feed models.

`likes_count` and `comments_count` on `Post` are denormalised counters
recomputed from the rows after every write; they may briefly lag under
concurrent writers.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Post(models.Model):
    TYPE_TEXT = "text"
    TYPE_IMAGE = "image"
    TYPE_VIDEO = "video"
    TYPE_AI_SUBMISSION = "ai_submission"
    TYPE_CHOICES = (
        (TYPE_TEXT, "Text"),
        (TYPE_IMAGE, "Image"),
        (TYPE_VIDEO, "Video"),
        (TYPE_AI_SUBMISSION, "AI submission"),
    )

    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="posts")
    content = models.TextField(blank=True)
    post_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_TEXT)
    media_url = models.URLField(max_length=500, blank=True)
    # Opaque evaluator output, stored as received
    ai_evaluation = models.JSONField(null=True, blank=True)
    score = models.FloatField(null=True, blank=True)
    likes_count = models.PositiveIntegerField(default=0)
    comments_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.author_id}:{self.post_type}:{self.content[:20]}"


class Reaction(models.Model):
    TYPE_LIKE = "like"
    TYPE_LOVE = "love"
    TYPE_HAHA = "haha"
    TYPE_WOW = "wow"
    TYPE_SAD = "sad"
    TYPE_ANGRY = "angry"
    TYPE_CHOICES = (
        (TYPE_LIKE, "Like"),
        (TYPE_LOVE, "Love"),
        (TYPE_HAHA, "Haha"),
        (TYPE_WOW, "Wow"),
        (TYPE_SAD, "Sad"),
        (TYPE_ANGRY, "Angry"),
    )

    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="reactions")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="post_reactions")
    reaction_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_LIKE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["post", "user"], name="unique_reaction_per_user_post"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id}:{self.reaction_type}@{self.post_id}"


class Comment(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="post_comments")
    parent = models.ForeignKey("self", on_delete=models.CASCADE, null=True, blank=True, related_name="replies")
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.author_id}@{self.post_id}: {self.content[:20]}"
