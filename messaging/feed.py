"""In-memory conversation state fed by realtime events.

This is the listener half of the realtime path: it never talks to the
database or the channel layer, it only merges event dicts (as produced
by `messaging.events`) into local state. The same message delivered
twice is kept once.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from django.utils.dateparse import parse_datetime

from . import events
from .unread import count_unread


def _as_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return parse_datetime(value)


@dataclass(frozen=True)
class FeedMessage:
    id: int
    sender_id: int
    created_at: datetime
    content: str = ""
    message_type: str = "text"
    media_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "FeedMessage":
        return cls(
            id=int(payload["id"]),
            sender_id=int(payload["sender_id"]),
            created_at=_as_datetime(payload["created_at"]),
            content=payload.get("content") or "",
            message_type=payload.get("message_type") or "text",
            media_url=payload.get("media_url"),
        )


class ConversationFeed:
    """One conversation as seen by one viewer, oldest message first."""

    def __init__(
        self,
        conversation_id: int,
        viewer_id: int,
        messages: Iterable[FeedMessage] = (),
        last_read_at: Optional[datetime] = None,
        last_message_at: Optional[datetime] = None,
    ):
        self.conversation_id = int(conversation_id)
        self.viewer_id = int(viewer_id)
        self.last_read_at = last_read_at
        self.last_message_at = last_message_at
        self.typing: set[int] = set()
        self._messages: list[FeedMessage] = []
        self._ids: set[int] = set()
        for m in sorted(messages, key=lambda m: (m.created_at, m.id)):
            self._add(m)

    @classmethod
    def from_page(cls, conversation_id, viewer_id, page, last_read_at=None, last_message_at=None) -> "ConversationFeed":
        """Seed from a `MessagePage` (newest first) returned by `fetch_messages`."""
        items = [FeedMessage.from_payload(events.serialize_message(m)) for m in page.messages]
        if last_message_at is None and items:
            last_message_at = max(m.created_at for m in items)
        return cls(conversation_id, viewer_id, items, last_read_at=last_read_at, last_message_at=last_message_at)

    @property
    def messages(self) -> list[FeedMessage]:
        return list(self._messages)

    @property
    def unread_count(self) -> int:
        return count_unread(self._messages, self.viewer_id, self.last_read_at)

    def _add(self, message: FeedMessage) -> bool:
        if message.id in self._ids:
            return False
        self._ids.add(message.id)
        self._messages.append(message)
        if len(self._messages) > 1 and (self._messages[-2].created_at, self._messages[-2].id) > (message.created_at, message.id):
            self._messages.sort(key=lambda m: (m.created_at, m.id))
        if self.last_message_at is None or message.created_at > self.last_message_at:
            self.last_message_at = message.created_at
        return True

    def apply(self, event: dict) -> bool:
        """Merge one event; returns whether local state changed."""
        kind = event.get("type")
        if kind == events.MESSAGE_CREATED:
            message = FeedMessage.from_payload(event["message"])
            if message.sender_id in self.typing:
                self.typing.discard(message.sender_id)
            return self._add(message)
        if kind == events.PARTICIPANT_READ:
            if int(event["user_id"]) != self.viewer_id:
                return False
            at = _as_datetime(event.get("last_read_at"))
            if at is None or (self.last_read_at is not None and at <= self.last_read_at):
                return False
            self.last_read_at = at
            return True
        if kind == events.TYPING:
            user_id = int(event["user_id"])
            if user_id == self.viewer_id:
                return False
            before = user_id in self.typing
            if event.get("is_typing"):
                self.typing.add(user_id)
            else:
                self.typing.discard(user_id)
            return before != (user_id in self.typing)
        return False

    def mark_read(self, at: Optional[datetime] = None) -> None:
        """Local optimistic read marker, e.g. when the viewer opens the conversation."""
        at = at or self.last_message_at
        if at is not None and (self.last_read_at is None or at > self.last_read_at):
            self.last_read_at = at


class InboxState:
    """All of a viewer's conversation feeds keyed by conversation id."""

    def __init__(self, viewer_id: int):
        self.viewer_id = int(viewer_id)
        self.feeds: dict[int, ConversationFeed] = {}

    def add(self, feed: ConversationFeed) -> ConversationFeed:
        self.feeds[feed.conversation_id] = feed
        return feed

    def feed(self, conversation_id) -> ConversationFeed:
        cid = int(conversation_id)
        if cid not in self.feeds:
            self.feeds[cid] = ConversationFeed(cid, self.viewer_id)
        return self.feeds[cid]

    def apply(self, event: dict) -> bool:
        if event.get("type") == events.MESSAGE_CREATED:
            conversation_id = event["message"]["conversation_id"]
        else:
            conversation_id = event.get("conversation_id")
        if conversation_id is None:
            return False
        return self.feed(conversation_id).apply(event)

    @property
    def total_unread(self) -> int:
        return sum(f.unread_count for f in self.feeds.values())

    def ordered(self) -> list[ConversationFeed]:
        """Feeds with the most recent activity first."""
        return sorted(
            self.feeds.values(),
            key=lambda f: (f.last_message_at is not None, f.last_message_at or datetime.min, f.conversation_id),
            reverse=True,
        )
