"""Serializers for REST API v1.

Model serializers describe what the API returns; the small input
serializers validate request bodies before they are handed to the
service functions, which own the business rules.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.identity import identity_for
from accounts.models import Role
from challenges.models import Challenge, Difficulty
from community.models import Comment, Post, Reaction
from messaging.models import Message

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "display_name", "avatar_url", "role")

    def get_display_name(self, obj) -> str:
        return identity_for(obj).display_name

    def get_avatar_url(self, obj) -> str:
        return identity_for(obj).avatar_url

    def get_role(self, obj) -> str | None:
        profile = getattr(obj, "profile", None)
        return getattr(profile, "role", None)


class ConversationCreateSerializer(serializers.Serializer):
    participant_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), min_length=1, max_length=50)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)
    message_type = serializers.ChoiceField(choices=Message.TYPE_CHOICES, default=Message.TYPE_TEXT)
    media_url = serializers.URLField(required=False, allow_blank=True, default="", max_length=500)


class ChallengeSerializer(serializers.ModelSerializer):
    creator = UserSerializer(read_only=True)

    class Meta:
        model = Challenge
        fields = (
            "id",
            "title",
            "description",
            "video_id",
            "video_url",
            "embed_url",
            "thumbnail_url",
            "difficulty",
            "duration",
            "challenge_type",
            "topics",
            "is_active",
            "featured",
            "challenge_date",
            "creator",
            "created_at",
        )
        read_only_fields = fields


class ChallengeCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=300)
    video_url = serializers.URLField(max_length=500)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    difficulty = serializers.ChoiceField(choices=Difficulty.choices, default=Difficulty.BEGINNER)
    duration = serializers.IntegerField(min_value=0, required=False, default=0)
    topics = serializers.ListField(child=serializers.CharField(max_length=100), required=False, default=list)


class PostSerializer(serializers.ModelSerializer):
    author = UserSerializer(read_only=True)

    class Meta:
        model = Post
        fields = (
            "id",
            "author",
            "content",
            "post_type",
            "media_url",
            "ai_evaluation",
            "score",
            "likes_count",
            "comments_count",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("author", "likes_count", "comments_count", "created_at", "updated_at")

    def validate(self, attrs):
        post_type = attrs.get("post_type", getattr(self.instance, "post_type", Post.TYPE_TEXT))
        content = attrs.get("content", getattr(self.instance, "content", ""))
        media_url = attrs.get("media_url", getattr(self.instance, "media_url", ""))
        if post_type == Post.TYPE_TEXT and not (content or "").strip():
            raise serializers.ValidationError({"content": "Text posts need content."})
        if post_type in (Post.TYPE_IMAGE, Post.TYPE_VIDEO) and not media_url:
            raise serializers.ValidationError({"media_url": "Media posts need a media URL."})
        return attrs


class CommentSerializer(serializers.ModelSerializer):
    author = UserSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ("id", "post", "author", "parent", "content", "created_at")
        read_only_fields = fields


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=2000)
    parent = serializers.IntegerField(required=False, allow_null=True, default=None)


class ReactionSerializer(serializers.Serializer):
    reaction_type = serializers.ChoiceField(choices=Reaction.TYPE_CHOICES, default=Reaction.TYPE_LIKE)


class AccountApprovalSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=("approve", "reject", "deactivate"))
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)
