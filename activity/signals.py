from __future__ import annotations

from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from accounts.models import Role
from .models import Notification
from .services import notify_role


@receiver(post_save, sender=User)
def notify_admins_of_new_account(sender, instance: User, created: bool, **kwargs):
    if not created or instance.is_superuser:
        return
    # Admins approve new accounts from the moderation panel
    notify_role(
        Role.ADMIN,
        Notification.TYPE_ACCOUNT,
        "New account pending approval",
        f"{instance.email or instance.username} registered and is waiting for approval.",
        link=f"/api/v1/admin/users/{instance.pk}/approval/",
        actor_id=instance.pk,
    )
