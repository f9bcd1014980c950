"""Realtime event payloads and channel-layer broadcast helpers.

Message events go to `conversation_<id>`; read markers go to the reader's
own `user_<id>` group so other participants never see them.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "message.created"
PARTICIPANT_READ = "participant.read"
TYPING = "typing"


def conversation_group(conversation_id) -> str:
    return f"conversation_{conversation_id}"


def user_group(user_id) -> str:
    return f"user_{user_id}"


def serialize_message(message) -> dict:
    return {
        "id": message.pk,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "content": message.content,
        "message_type": message.message_type,
        "media_url": message.media_url or None,
        "created_at": message.created_at.isoformat(),
    }


def message_created_event(message) -> dict:
    return {"type": MESSAGE_CREATED, "message": serialize_message(message)}


def participant_read_event(conversation_id, user_id, last_read_at) -> dict:
    return {
        "type": PARTICIPANT_READ,
        "conversation_id": int(conversation_id),
        "user_id": int(user_id),
        "last_read_at": last_read_at.isoformat() if last_read_at else None,
    }


def typing_event(conversation_id, user_id, is_typing: bool) -> dict:
    return {
        "type": TYPING,
        "conversation_id": int(conversation_id),
        "user_id": int(user_id),
        "is_typing": bool(is_typing),
    }


def broadcast(group: str, event: dict) -> bool:
    """Send `event` to `group` from synchronous code.

    The event is wrapped for the consumers' `realtime_event` handler.
    Returns False when no channel layer is configured or the send fails;
    the write that produced the event has already succeeded by then.
    """
    layer = get_channel_layer()
    if layer is None:
        return False
    try:
        async_to_sync(layer.group_send)(group, {"type": "realtime.event", "event": event})
    except Exception:
        logger.exception("Broadcast of %s to %s failed", event.get("type"), group)
        return False
    return True
