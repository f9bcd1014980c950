from __future__ import annotations

import logging
import time

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.contrib.auth.models import AnonymousUser
from django.utils.dateparse import parse_datetime

from config.results import UNEXPECTED, Result

from . import events, services

logger = logging.getLogger(__name__)

RATE_LIMIT_COUNT = 5
RATE_LIMIT_WINDOW = 5.0


@database_sync_to_async
def _conversation_auth(user, conversation_id: int) -> tuple[bool, str]:
    if not user or isinstance(user, AnonymousUser) or not user.is_active:
        return False, "Authentication required"
    if not services.is_participant(conversation_id, user.id):
        return False, "Not a participant"
    return True, ""


@database_sync_to_async
def _send(conversation_id: int, user, content: dict):
    return services.send_message(
        conversation_id,
        user.id,
        content.get("content", ""),
        message_type=content.get("message_type") or "text",
        media_url=content.get("media_url") or "",
    )


@database_sync_to_async
def _mark_read(conversation_id: int, user, at):
    return services.mark_read(conversation_id, user.id, at=at)


class ConversationConsumer(AsyncJsonWebsocketConsumer):
    """Websocket for one conversation.

    Joins `conversation_<id>` for message and typing events and the user's
    own `user_<id>` group for read markers. Inbound frames:
    `{"type": "message.send", "content": ...}`, `{"type": "read"}` and
    `{"type": "typing", "is_typing": bool}`.
    """

    async def connect(self):
        self.conversation_id = int(self.scope["url_route"]["kwargs"]["conversation_id"])
        self.user = self.scope.get("user")
        self.groups_joined: list[str] = []
        ok, reason = await _conversation_auth(self.user, self.conversation_id)
        if not ok:
            logger.info("Websocket for conversation %s refused: %s", self.conversation_id, reason)
            await self.close(code=4001)
            return
        # Per-connection limiter for outgoing messages
        self._rate_ts: list[float] = []
        for group in (events.conversation_group(self.conversation_id), events.user_group(self.user.id)):
            await self.channel_layer.group_add(group, self.channel_name)
            self.groups_joined.append(group)
        await self.accept()

    def _rate_limited(self) -> bool:
        now = time.monotonic()
        self._rate_ts = [t for t in self._rate_ts if now - t < RATE_LIMIT_WINDOW]
        if len(self._rate_ts) >= RATE_LIMIT_COUNT:
            return True
        self._rate_ts.append(now)
        return False

    async def _call(self, action, *args):
        try:
            result = await action(*args)
        except Exception:
            logger.exception("Websocket action failed in conversation %s", self.conversation_id)
            result = Result.failure(UNEXPECTED, "Something went wrong. Please try again.")
        if not result.ok:
            await self.send_json({"type": "error", **result.as_payload()})

    async def receive_json(self, content, **kwargs):
        content = content or {}
        kind = content.get("type")
        if kind == "message.send":
            if self._rate_limited():
                # Dropped without a reply to avoid feedback loops
                return
            await self._call(_send, self.conversation_id, self.user, content)
        elif kind == "read":
            try:
                at = parse_datetime(content["at"]) if content.get("at") else None
            except (TypeError, ValueError):
                at = None
            await self._call(_mark_read, self.conversation_id, self.user, at)
        elif kind == "typing":
            event = events.typing_event(self.conversation_id, self.user.id, content.get("is_typing", True))
            await self.channel_layer.group_send(
                events.conversation_group(self.conversation_id), {"type": "realtime.event", "event": event}
            )
        else:
            await self.send_json({"type": "error", "success": False, "error": f"Unknown frame type: {kind}", "code": "validation"})

    async def realtime_event(self, event):
        await self.send_json(event["event"])

    async def disconnect(self, code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)
