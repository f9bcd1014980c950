from django.apps import AppConfig


class CommunityConfig(AppConfig):
    """App configuration for community posts, reactions and comments."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "community"
