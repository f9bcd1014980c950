"""Conversation and message operations.

All functions return a `config.results.Result`; database errors are logged
and reported as `query_failed`, never raised to the caller. Broadcasts go
out after the write has been committed by the surrounding atomic block.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import Count, DateTimeField, IntegerField, OuterRef, Q, Subquery, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounts.identity import UserIdentity, identity_for
from config.results import NOT_FOUND, PERMISSION_DENIED, QUERY_FAILED, VALIDATION, Result

from . import events
from .models import Conversation, ConversationParticipant, Message
from .unread import EPOCH, unread_filter

logger = logging.getLogger(__name__)
User = get_user_model()

MEDIA_TYPES = {Message.TYPE_IMAGE, Message.TYPE_VIDEO, Message.TYPE_AUDIO, Message.TYPE_FILE}


@dataclass
class MessagePreview:
    id: int
    sender_id: int
    content: str
    message_type: str
    created_at: datetime

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "content": self.content,
            "message_type": self.message_type,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ConversationSummary:
    id: int
    title: str
    status: str
    last_message_at: Optional[datetime]
    last_read_at: Optional[datetime]
    unread_count: int = 0
    last_message: Optional[MessagePreview] = None
    participants: list[UserIdentity] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "last_message_at": self.last_message_at.isoformat() if self.last_message_at else None,
            "last_read_at": self.last_read_at.isoformat() if self.last_read_at else None,
            "unread_count": self.unread_count,
            "last_message": self.last_message.as_dict() if self.last_message else None,
            "participants": [p.as_dict() for p in self.participants],
        }


@dataclass
class MessagePage:
    messages: list[Message]
    unread_count: int
    limit: int
    offset: int
    has_more: bool

    def as_dict(self) -> dict:
        return {
            "messages": [events.serialize_message(m) for m in self.messages],
            "unread_count": self.unread_count,
            "limit": self.limit,
            "offset": self.offset,
            "has_more": self.has_more,
        }


def _participant(conversation_id, user_id) -> ConversationParticipant | None:
    return (
        ConversationParticipant.objects.select_related("conversation")
        .filter(conversation_id=conversation_id, user_id=user_id)
        .first()
    )


def _membership_failure(conversation_id) -> Result:
    if Conversation.objects.filter(pk=conversation_id).exists():
        return Result.failure(PERMISSION_DENIED, "You are not a participant of this conversation.")
    return Result.failure(NOT_FOUND, "Conversation not found.")


def is_participant(conversation_id, user_id) -> bool:
    if not user_id:
        return False
    return ConversationParticipant.objects.filter(conversation_id=conversation_id, user_id=user_id).exists()


def _unread_for(conversation_id, viewer_id, last_read_at) -> int:
    return Message.objects.filter(conversation_id=conversation_id).filter(unread_filter(viewer_id, last_read_at)).count()


def _memberships(user_id):
    """The user's participant rows annotated with `unread_count` and `latest_message_id`.

    Both come from correlated subqueries, so the row count does not grow the
    number of queries.
    """
    unread = (
        Message.objects.filter(
            conversation_id=OuterRef("conversation_id"),
            created_at__gt=Coalesce(OuterRef("last_read_at"), Value(EPOCH, output_field=DateTimeField())),
        )
        .exclude(sender_id=user_id)
        .order_by()
        .values("conversation_id")
        .annotate(n=Count("id"))
        .values("n")
    )
    latest = Message.objects.filter(conversation_id=OuterRef("conversation_id")).order_by("-created_at", "-id")
    return ConversationParticipant.objects.filter(user_id=user_id).annotate(
        unread_count=Coalesce(Subquery(unread[:1], output_field=IntegerField()), 0),
        latest_message_id=Subquery(latest.values("id")[:1]),
    )


def list_conversations(user_id) -> Result:
    """Conversations the user participates in, newest activity first.

    Runs a fixed number of queries: memberships (with unread counts and the
    latest message id), co-participant identities, and the latest-message
    previews. A missing profile degrades to the account e-mail.
    """
    if not user_id:
        return Result.failure(VALIDATION, "User id is required.")
    try:
        memberships = list(_memberships(user_id).select_related("conversation").order_by("conversation_id"))
        summaries: dict[int, ConversationSummary] = {}
        latest_ids: list[int] = []
        for p in memberships:
            if p.conversation_id in summaries:
                continue
            c = p.conversation
            summaries[c.pk] = ConversationSummary(
                id=c.pk,
                title=c.title,
                status=c.status,
                last_message_at=c.last_message_at,
                last_read_at=p.last_read_at,
                unread_count=p.unread_count,
            )
            if p.latest_message_id is not None:
                latest_ids.append(p.latest_message_id)
        if not summaries:
            return Result.success([])

        others = (
            ConversationParticipant.objects.select_related("user", "user__profile")
            .filter(conversation_id__in=list(summaries))
            .exclude(user_id=user_id)
        )
        for other in others:
            summaries[other.conversation_id].participants.append(identity_for(other.user))

        previews = Message.objects.filter(pk__in=latest_ids).only(
            "id", "conversation_id", "sender_id", "content", "message_type", "created_at"
        )
        for m in previews:
            summaries[m.conversation_id].last_message = MessagePreview(
                m.pk, m.sender_id, m.content, m.message_type, m.created_at
            )
    except DatabaseError:
        logger.exception("Loading conversations for user %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to load conversations.")

    ordered = sorted(
        summaries.values(),
        key=lambda s: (s.last_message_at is not None, s.last_message_at or timezone.now(), s.id),
        reverse=True,
    )
    return Result.success(ordered)


def start_conversation(creator_id, participant_ids: Iterable, title: str = "") -> Result:
    """Open a conversation between the creator and `participant_ids`.

    An untitled two-person conversation reuses the pair's existing active one.
    Data is `{"conversation": Conversation, "created": bool}`.
    """
    title = (title or "").strip()[:200]
    try:
        others = list(dict.fromkeys(int(pid) for pid in participant_ids if pid and str(pid) != str(creator_id)))
    except (TypeError, ValueError):
        return Result.failure(VALIDATION, "Participant ids must be integers.")
    if not others:
        return Result.failure(VALIDATION, "At least one other participant is required.")
    try:
        found = set(User.objects.filter(pk__in=[creator_id, *others], is_active=True).values_list("pk", flat=True))
        missing = [uid for uid in [int(creator_id), *others] if uid not in found]
        if missing:
            return Result.failure(VALIDATION, f"Unknown or inactive users: {', '.join(map(str, missing))}")

        if len(others) == 1 and not title:
            mine = ConversationParticipant.objects.filter(user_id=creator_id).values("conversation_id")
            theirs = ConversationParticipant.objects.filter(user_id=others[0]).values("conversation_id")
            existing = (
                Conversation.objects.filter(status=Conversation.STATUS_ACTIVE, title="", pk__in=mine)
                .filter(pk__in=theirs)
                .annotate(member_count=Count("participants"))
                .filter(member_count=2)
                .order_by("-last_message_at", "-id")
                .first()
            )
            if existing is not None:
                return Result.success({"conversation": existing, "created": False})

        with transaction.atomic():
            conversation = Conversation.objects.create(title=title, created_by_id=creator_id)
            ConversationParticipant.objects.bulk_create(
                [ConversationParticipant(conversation=conversation, user_id=creator_id, role=ConversationParticipant.ROLE_OWNER)]
                + [ConversationParticipant(conversation=conversation, user_id=uid) for uid in others]
            )
    except DatabaseError:
        logger.exception("Starting conversation for %s failed", creator_id)
        return Result.failure(QUERY_FAILED, "Failed to start conversation.")
    logger.info("Conversation %s started by %s with %s", conversation.pk, creator_id, others)
    return Result.success({"conversation": conversation, "created": True})


def close_conversation(conversation_id, user_id) -> Result:
    try:
        participant = _participant(conversation_id, user_id)
        if participant is None:
            return _membership_failure(conversation_id)
        conversation = participant.conversation
        if conversation.status != Conversation.STATUS_CLOSED:
            conversation.status = Conversation.STATUS_CLOSED
            conversation.save(update_fields=["status", "updated_at"])
    except DatabaseError:
        logger.exception("Closing conversation %s failed", conversation_id)
        return Result.failure(QUERY_FAILED, "Failed to close conversation.")
    return Result.success({"id": conversation.pk, "status": conversation.status})


def _page_size(limit) -> int:
    default = getattr(settings, "MESSAGES_PAGE_SIZE", 20)
    ceiling = getattr(settings, "MESSAGES_MAX_PAGE_SIZE", 100)
    if limit is None:
        return default
    return max(1, min(int(limit), ceiling))


def fetch_messages(conversation_id, viewer_id, limit=None, offset: int = 0) -> Result:
    """Newest-first page of messages plus the viewer's unread count.

    The unread count covers the whole conversation, not just this page.
    """
    try:
        size = _page_size(limit)
        offset = int(offset or 0)
    except (TypeError, ValueError):
        return Result.failure(VALIDATION, "limit and offset must be integers.")
    if offset < 0:
        return Result.failure(VALIDATION, "offset must not be negative.")
    try:
        participant = _participant(conversation_id, viewer_id)
        if participant is None:
            return _membership_failure(conversation_id)
        rows = list(
            Message.objects.filter(conversation_id=conversation_id).order_by("-created_at", "-id")[offset : offset + size + 1]
        )
        unread = _unread_for(conversation_id, viewer_id, participant.last_read_at)
    except DatabaseError:
        logger.exception("Fetching messages of conversation %s failed", conversation_id)
        return Result.failure(QUERY_FAILED, "Failed to load messages.")
    return Result.success(
        MessagePage(messages=rows[:size], unread_count=unread, limit=size, offset=offset, has_more=len(rows) > size)
    )


def send_message(conversation_id, sender_id, content: str, message_type: str = Message.TYPE_TEXT, media_url: str = "") -> Result:
    content = (content or "").strip()
    media_url = (media_url or "").strip()
    max_length = getattr(settings, "MESSAGE_MAX_LENGTH", 2000)
    if message_type not in dict(Message.TYPE_CHOICES):
        return Result.failure(VALIDATION, f"Unknown message type: {message_type}")
    if message_type == Message.TYPE_TEXT and not content:
        return Result.failure(VALIDATION, "Message content is required.")
    if message_type in MEDIA_TYPES and not media_url:
        return Result.failure(VALIDATION, "A media URL is required for media messages.")
    if len(content) > max_length:
        return Result.failure(VALIDATION, f"Message content must be at most {max_length} characters.")
    try:
        participant = _participant(conversation_id, sender_id)
        if participant is None:
            return _membership_failure(conversation_id)
        if not participant.conversation.is_active:
            return Result.failure(VALIDATION, "Conversation is closed.")
        with transaction.atomic():
            message = Message.objects.create(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=content,
                message_type=message_type,
                media_url=media_url,
            )
            Conversation.objects.filter(pk=conversation_id).update(
                last_message_at=message.created_at, updated_at=timezone.now()
            )
    except DatabaseError:
        logger.exception("Sending message to conversation %s failed", conversation_id)
        return Result.failure(QUERY_FAILED, "Failed to send message.")
    events.broadcast(events.conversation_group(conversation_id), events.message_created_event(message))
    return Result.success(message)


def mark_read(conversation_id, user_id, at: Optional[datetime] = None) -> Result:
    """Move the participant's read marker forward to `at` (default: now).

    `at` is clamped to the current time and the marker never moves back: an
    `at` at or before the stored marker leaves it unchanged and broadcasts
    nothing. Data carries the marker as stored after the call.
    """
    now = timezone.now()
    if at is not None and timezone.is_naive(at):
        at = timezone.make_aware(at)
    at = min(at, now) if at is not None else now
    try:
        participant = _participant(conversation_id, user_id)
        if participant is None:
            return _membership_failure(conversation_id)
        moved = (
            ConversationParticipant.objects.filter(pk=participant.pk)
            .filter(Q(last_read_at__isnull=True) | Q(last_read_at__lt=at))
            .update(last_read_at=at)
        )
        if not moved:
            at = ConversationParticipant.objects.values_list("last_read_at", flat=True).get(pk=participant.pk)
    except DatabaseError:
        logger.exception("Marking conversation %s read for %s failed", conversation_id, user_id)
        return Result.failure(QUERY_FAILED, "Failed to mark conversation as read.")
    if moved:
        events.broadcast(events.user_group(user_id), events.participant_read_event(conversation_id, user_id, at))
    return Result.success({"conversation_id": int(conversation_id), "last_read_at": at})


def total_unread(user_id) -> Result:
    try:
        total = sum(_memberships(user_id).values_list("unread_count", flat=True))
    except DatabaseError:
        logger.exception("Counting unread messages for %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to count unread messages.")
    return Result.success(total)
