"""Admin moderation actions on user accounts.

Each action checks that the acting user is an admin, applies a single
profile/user update and notifies the affected user. Accounts are never
deleted; rejection and deactivation clear `User.is_active`.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from activity.models import Notification
from activity.services import notify_users
from config.results import NOT_FOUND, PERMISSION_DENIED, QUERY_FAILED, VALIDATION, Result

from .models import ApprovalStatus, Role, UserProfile

logger = logging.getLogger(__name__)
User = get_user_model()

_ADMIN_REQUIRED = "Admin access required."


def _is_admin(user_id) -> bool:
    return UserProfile.objects.filter(user_id=user_id, role=Role.ADMIN, user__is_active=True).exists()


def _load_profile(user_id) -> UserProfile | None:
    return UserProfile.objects.select_related("user").filter(user_id=user_id).first()


def approve_account(user_id, admin_id) -> Result:
    try:
        if not _is_admin(admin_id):
            return Result.failure(PERMISSION_DENIED, _ADMIN_REQUIRED)
        profile = _load_profile(user_id)
        if profile is None:
            return Result.failure(NOT_FOUND, "User not found.")
        with transaction.atomic():
            profile.approval_status = ApprovalStatus.APPROVED
            profile.approval_reason = ""
            profile.save(update_fields=["approval_status", "approval_reason", "updated_at"])
            if not profile.user.is_active:
                profile.user.is_active = True
                profile.user.save(update_fields=["is_active"])
    except DatabaseError:
        logger.exception("Approving account %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to approve account.")
    logger.info("Account %s approved by %s", user_id, admin_id)
    notify_users(
        [user_id],
        Notification.TYPE_ACCOUNT,
        "Account approved",
        "Your account has been approved. Welcome to EnglishMastery!",
        actor_id=admin_id,
    )
    return Result.success({"user_id": profile.user_id, "approval_status": profile.approval_status})


def reject_account(user_id, admin_id, reason: str = "") -> Result:
    reason = (reason or "").strip()[:500]
    try:
        if not _is_admin(admin_id):
            return Result.failure(PERMISSION_DENIED, _ADMIN_REQUIRED)
        if str(user_id) == str(admin_id):
            return Result.failure(VALIDATION, "Admins cannot reject their own account.")
        profile = _load_profile(user_id)
        if profile is None:
            return Result.failure(NOT_FOUND, "User not found.")
        with transaction.atomic():
            profile.approval_status = ApprovalStatus.REJECTED
            profile.approval_reason = reason
            profile.save(update_fields=["approval_status", "approval_reason", "updated_at"])
            profile.user.is_active = False
            profile.user.save(update_fields=["is_active"])
    except DatabaseError:
        logger.exception("Rejecting account %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to reject account.")
    logger.info("Account %s rejected by %s", user_id, admin_id)
    notify_users(
        [user_id],
        Notification.TYPE_ACCOUNT,
        "Account rejected",
        f"Your account was not approved. {reason}".strip(),
        actor_id=admin_id,
    )
    return Result.success({"user_id": profile.user_id, "approval_status": profile.approval_status})


def change_role(user_id, role: str, admin_id) -> Result:
    if role not in Role.values:
        return Result.failure(VALIDATION, f"Unknown role: {role}")
    try:
        if not _is_admin(admin_id):
            return Result.failure(PERMISSION_DENIED, _ADMIN_REQUIRED)
        if str(user_id) == str(admin_id) and role != Role.ADMIN:
            return Result.failure(VALIDATION, "Admins cannot demote themselves.")
        updated = UserProfile.objects.filter(user_id=user_id).update(role=role)
    except DatabaseError:
        logger.exception("Changing role of %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to change role.")
    if not updated:
        return Result.failure(NOT_FOUND, "User not found.")
    logger.info("Role of %s changed to %s by %s", user_id, role, admin_id)
    notify_users(
        [user_id],
        Notification.TYPE_ACCOUNT,
        "Role updated",
        f"Your role is now {Role(role).label}.",
        actor_id=admin_id,
    )
    return Result.success({"user_id": int(user_id), "role": role})


def deactivate_account(user_id, admin_id) -> Result:
    try:
        if not _is_admin(admin_id):
            return Result.failure(PERMISSION_DENIED, _ADMIN_REQUIRED)
        if str(user_id) == str(admin_id):
            return Result.failure(VALIDATION, "Admins cannot deactivate their own account.")
        updated = User.objects.filter(pk=user_id).update(is_active=False)
    except DatabaseError:
        logger.exception("Deactivating %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to deactivate account.")
    if not updated:
        return Result.failure(NOT_FOUND, "User not found.")
    logger.info("Account %s deactivated by %s", user_id, admin_id)
    notify_users(
        [user_id],
        Notification.TYPE_ACCOUNT,
        "Account deactivated",
        "Your account has been deactivated by an administrator.",
        actor_id=admin_id,
    )
    return Result.success({"user_id": int(user_id), "is_active": False})
