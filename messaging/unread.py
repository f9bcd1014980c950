"""Unread-message predicate shared by the database query and in-memory feeds.

A message is unread for a viewer when someone else sent it strictly after
the viewer's `last_read_at`. A null `last_read_at` means "never read" and
compares as the Unix epoch; a message stamped exactly at `last_read_at`
counts as read.
"""
from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import Iterable, Optional

from django.db.models import Q

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def read_marker(last_read_at: Optional[datetime]) -> datetime:
    return last_read_at if last_read_at is not None else EPOCH


def is_unread(sender_id, created_at: datetime, viewer_id, last_read_at: Optional[datetime]) -> bool:
    return str(sender_id) != str(viewer_id) and created_at > read_marker(last_read_at)


def count_unread(messages: Iterable, viewer_id, last_read_at: Optional[datetime]) -> int:
    """Count unread items among objects exposing `sender_id` and `created_at`."""
    return sum(1 for m in messages if is_unread(m.sender_id, m.created_at, viewer_id, last_read_at))


def unread_filter(viewer_id, last_read_at: Optional[datetime], prefix: str = "") -> Q:
    """ORM equivalent of `is_unread` for `Message` rows (or a related path via `prefix`)."""
    return Q(**{f"{prefix}created_at__gt": read_marker(last_read_at)}) & ~Q(**{f"{prefix}sender_id": viewer_id})
