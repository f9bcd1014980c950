"""REST API v1 viewsets and endpoints.

Writes go through the service layer (`messaging.services`,
`challenges.services`, `community.services`, `accounts.services`), which
returns a `Result`; `_respond` turns that into the `{success, data}` /
`{success, error, code}` body with the matching HTTP status.
"""
from __future__ import annotations

import hmac
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts import services as account_services
from challenges import services as challenge_services
from challenges.models import Challenge
from challenges.video_source import get_video_source
from community import services as community_services
from community.models import Comment, Post
from config.results import Result
from messaging import events
from messaging import services as messaging_services

from .permissions import IsAdminRole, IsAuthenticatedOrReadOnly, IsAuthorOrReadOnly
from .serializers import (
    AccountApprovalSerializer,
    ChallengeCreateSerializer,
    ChallengeSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    ConversationCreateSerializer,
    MessageCreateSerializer,
    PostSerializer,
    ReactionSerializer,
    RoleChangeSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()


def _respond(result: Result, data=None, success_status: int = status.HTTP_200_OK) -> Response:
    if result.ok:
        return Response(result.as_payload(data), status=success_status)
    return Response(result.as_payload(), status=result.http_status())


class UserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.filter(is_active=True).select_related("profile").order_by("username")
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]
    search_fields = ["username", "profile__username", "profile__full_name"]
    ordering_fields = ["username", "id"]


class ConversationViewSet(viewsets.ViewSet):
    """Conversations of the current user.

    `list` returns resolver summaries (not paginated); messages page with
    `?limit=&offset=`.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        result = messaging_services.list_conversations(request.user.id)
        if not result.ok:
            return _respond(result)
        results = [s.as_dict() for s in result.data]
        return Response({"count": len(results), "results": results})

    def create(self, request):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = messaging_services.start_conversation(
            request.user.id, serializer.validated_data["participant_ids"], title=serializer.validated_data["title"]
        )
        if not result.ok:
            return _respond(result)
        conversation = result.data["conversation"]
        data = {
            "id": conversation.pk,
            "title": conversation.title,
            "status": conversation.status,
            "created": result.data["created"],
        }
        return _respond(result, data, status.HTTP_201_CREATED if result.data["created"] else status.HTTP_200_OK)

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        if request.method == "POST":
            serializer = MessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            result = messaging_services.send_message(pk, request.user.id, **serializer.validated_data)
            data = events.serialize_message(result.data) if result.ok else None
            return _respond(result, data, status.HTTP_201_CREATED)
        result = messaging_services.fetch_messages(
            pk,
            request.user.id,
            limit=request.query_params.get("limit"),
            offset=request.query_params.get("offset") or 0,
        )
        return _respond(result, result.data.as_dict() if result.ok else None)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = messaging_services.mark_read(pk, request.user.id)
        data = None
        if result.ok:
            data = {**result.data, "last_read_at": result.data["last_read_at"].isoformat()}
        return _respond(result, data)

    @action(detail=True, methods=["post"])
    def close(self, request, pk=None):
        return _respond(messaging_services.close_conversation(pk, request.user.id))

    @action(detail=False, methods=["get"])
    def unread(self, request):
        result = messaging_services.total_unread(request.user.id)
        return _respond(result, {"total_unread": result.data} if result.ok else None)


class ChallengeViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Challenge.objects.filter(is_active=True).select_related("creator", "creator__profile")
    serializer_class = ChallengeSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    filterset_fields = ["challenge_type", "difficulty", "featured", "challenge_date"]
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "challenge_date", "duration"]

    def create(self, request, *args, **kwargs):
        serializer = ChallengeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = challenge_services.create_user_challenge(request.user.id, serializer.validated_data)
        data = ChallengeSerializer(result.data).data if result.ok else None
        return _respond(result, data, status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        result = challenge_services.delete_challenge(kwargs["pk"], request.user.id)
        return _respond(result)

    @action(detail=False, methods=["get"])
    def current(self, request):
        result = challenge_services.current_challenge()
        if result.ok and result.data is None:
            return Response({"success": False, "error": "No current challenge.", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)
        return _respond(result, ChallengeSerializer(result.data).data if result.ok else None)


class PostViewSet(viewsets.ModelViewSet):
    queryset = Post.objects.select_related("author", "author__profile")
    serializer_class = PostSerializer
    permission_classes = [IsAuthenticatedOrReadOnly, IsAuthorOrReadOnly]
    filterset_fields = ["post_type", "author"]
    search_fields = ["content"]
    ordering_fields = ["created_at", "likes_count", "comments_count", "score"]

    def perform_create(self, serializer):
        serializer.save(author=self.request.user)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def react(self, request, pk=None):
        serializer = ReactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _respond(community_services.react_to_post(pk, request.user.id, serializer.validated_data["reaction_type"]))

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def unreact(self, request, pk=None):
        return _respond(community_services.remove_reaction(pk, request.user.id))

    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticatedOrReadOnly])
    def comments(self, request, pk=None):
        if request.method == "POST":
            serializer = CommentCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            result = community_services.add_comment(
                pk, request.user.id, serializer.validated_data["content"], parent_id=serializer.validated_data["parent"]
            )
            data = CommentSerializer(result.data).data if result.ok else None
            return _respond(result, data, status.HTTP_201_CREATED)
        post = self.get_object()
        qs = Comment.objects.filter(post=post).select_related("author", "author__profile")
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CommentSerializer(page, many=True).data)
        return Response(CommentSerializer(qs, many=True).data)


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def comment_delete(request, pk: int):
    return _respond(community_services.delete_comment(pk, request.user.id))


@api_view(["GET"])
@permission_classes([IsAdminRole])
def search_users(request):
    """Admin-only search by username, e-mail or full name (partial, case-insensitive)."""
    q = request.query_params.get("q", "").strip()
    qs = User.objects.select_related("profile").none()
    if q:
        qs = (
            User.objects.select_related("profile")
            .filter(Q(username__icontains=q) | Q(email__icontains=q) | Q(profile__full_name__icontains=q))
            .order_by("username")[:50]
        )
    data = UserSerializer(qs, many=True).data
    return Response({"count": len(data), "results": data})


@api_view(["POST"])
@permission_classes([IsAdminRole])
def account_approval(request, user_id: int):
    serializer = AccountApprovalSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    choice = serializer.validated_data["action"]
    if choice == "approve":
        result = account_services.approve_account(user_id, request.user.id)
    elif choice == "reject":
        result = account_services.reject_account(user_id, request.user.id, serializer.validated_data["reason"])
    else:
        result = account_services.deactivate_account(user_id, request.user.id)
    return _respond(result)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def account_role(request, user_id: int):
    serializer = RoleChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return _respond(account_services.change_role(user_id, serializer.validated_data["role"], request.user.id))


@api_view(["POST", "GET"])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([])
def daily_video_refresh(request):
    """Scheduled hook: refresh today's daily and practice challenges.

    Requires `Authorization: Bearer <CRON_SECRET>`; an unset secret
    rejects every call.
    """
    secret = getattr(settings, "CRON_SECRET", "")
    supplied = request.headers.get("Authorization", "")
    if not secret or not hmac.compare_digest(supplied.encode(), f"Bearer {secret}".encode()):
        return Response({"success": False, "error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

    started = timezone.now()
    try:
        summary = challenge_services.refresh_daily_challenges(get_video_source())
    except Exception as e:
        logger.exception("Daily video refresh failed")
        return Response(
            {"success": False, "error": str(e) or "Unknown error", "generated_at": timezone.now().isoformat()},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    finished = timezone.now()
    summary["generated_at"] = finished.isoformat()
    summary["duration_ms"] = int((finished - started).total_seconds() * 1000)
    logger.info(
        "Daily video refresh: daily=%s practice=%s errors=%s",
        bool(summary["daily_challenge"]),
        summary["practice_challenges"]["count"],
        len(summary["errors"]),
    )
    return Response({"success": True, "data": summary})
