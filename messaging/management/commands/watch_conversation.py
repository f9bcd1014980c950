"""Follow a conversation's realtime events from the terminal.

    python manage.py watch_conversation 12 --user 3

Seeds an `InboxState` from the latest page of messages, then subscribes a
fresh channel to the conversation and user groups and prints each event
that changes local state together with the running unread count.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.management.base import BaseCommand, CommandError

from messaging import events
from messaging.feed import ConversationFeed, InboxState
from messaging.models import ConversationParticipant
from messaging.services import fetch_messages

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Subscribe to a conversation and print realtime events as they arrive."

    def add_arguments(self, parser):
        parser.add_argument("conversation_id", type=int)
        parser.add_argument("--user", type=int, required=True, help="Viewer user id (must be a participant).")
        parser.add_argument("--limit", type=int, default=None, help="Stop after this many applied events.")

    def handle(self, *args, **options):
        conversation_id = options["conversation_id"]
        user_id = options["user"]
        result = fetch_messages(conversation_id, user_id)
        if not result.ok:
            raise CommandError(result.error.message)
        participant = ConversationParticipant.objects.select_related("conversation").get(
            conversation_id=conversation_id, user_id=user_id
        )
        inbox = InboxState(user_id)
        inbox.add(
            ConversationFeed.from_page(
                conversation_id,
                user_id,
                result.data,
                last_read_at=participant.last_read_at,
                last_message_at=participant.conversation.last_message_at,
            )
        )
        self.stdout.write(f"conversation={conversation_id} messages={len(result.data.messages)} unread={inbox.total_unread}")
        layer = get_channel_layer()
        if layer is None:
            raise CommandError("No channel layer is configured.")
        async_to_sync(self._listen)(layer, inbox, conversation_id, user_id, options["limit"])

    async def _listen(self, layer, inbox: InboxState, conversation_id: int, user_id: int, limit):
        if limit is not None and limit <= 0:
            return
        channel = await layer.new_channel()
        groups = [events.conversation_group(conversation_id), events.user_group(user_id)]
        for group in groups:
            await layer.group_add(group, channel)
        applied = 0
        try:
            while limit is None or applied < limit:
                message = await layer.receive(channel)
                event = message.get("event") or {}
                if not inbox.apply(event):
                    continue
                applied += 1
                logger.info("Applied %s to conversation %s", event.get("type"), conversation_id)
                self.stdout.write(f"{event.get('type')} unread={inbox.total_unread}")
        finally:
            for group in groups:
                await layer.group_discard(group, channel)
