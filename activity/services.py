"""Notification fan-out helpers.

Notifications are best effort: a failed insert is logged and reported as
a failed `Result`, never raised into the action that triggered it.
"""
from __future__ import annotations

import logging
from typing import Iterable

from django.db import DatabaseError

from config.results import NOT_FOUND, QUERY_FAILED, Result

from .models import Notification

logger = logging.getLogger(__name__)


def notify_users(
    user_ids: Iterable,
    type: str,
    title: str,
    message: str,
    link: str = "",
    actor_id=None,
) -> Result:
    """Create one notification per distinct recipient."""
    recipients = list(dict.fromkeys(uid for uid in user_ids if uid is not None))
    if not recipients:
        return Result.success(0)
    to_create = [
        Notification(
            user_id=uid,
            actor_id=actor_id,
            type=type,
            title=title[:120],
            message=message[:500],
            link=link,
        )
        for uid in recipients
    ]
    try:
        Notification.objects.bulk_create(to_create)
    except DatabaseError:
        logger.exception("Failed to create %s notification(s) of type %s", len(to_create), type)
        return Result.failure(QUERY_FAILED, "Failed to send notifications.")
    return Result.success(len(to_create))


def notify_role(role: str, type: str, title: str, message: str, link: str = "", actor_id=None) -> Result:
    """Notify every active user holding `role`."""
    from accounts.models import UserProfile

    user_ids = UserProfile.objects.filter(role=role, user__is_active=True).values_list("user_id", flat=True)
    return notify_users(user_ids, type, title, message, link=link, actor_id=actor_id)


def mark_notification_read(notification_id, user_id) -> Result:
    try:
        updated = Notification.objects.filter(pk=notification_id, user_id=user_id).update(read=True)
    except DatabaseError:
        logger.exception("Marking notification %s read for %s failed", notification_id, user_id)
        return Result.failure(QUERY_FAILED, "Failed to update notification.")
    if not updated:
        return Result.failure(NOT_FOUND, "Notification not found.")
    return Result.success({"id": int(notification_id), "read": True})


def mark_all_read(user_id) -> Result:
    try:
        updated = Notification.objects.filter(user_id=user_id, read=False).update(read=True)
    except DatabaseError:
        logger.exception("Marking all notifications read for %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to update notifications.")
    return Result.success({"updated": updated})
