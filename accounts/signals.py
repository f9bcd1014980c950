"""Signals for automatic profile management.

On user creation, create a default `UserProfile`. Superusers created via
`createsuperuser` start as approved admins so the moderation dashboard is
reachable on a fresh install.
"""
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import ApprovalStatus, Role, UserProfile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance: User, created: bool, **kwargs):  # noqa: D401
    """Create a profile for new users (default role: member, pending approval)."""
    if not created:
        return
    if instance.is_superuser:
        UserProfile.objects.create(user=instance, role=Role.ADMIN, approval_status=ApprovalStatus.APPROVED)
    else:
        UserProfile.objects.create(user=instance, role=Role.MEMBER)
