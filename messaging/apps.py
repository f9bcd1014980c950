from django.apps import AppConfig


class MessagingConfig(AppConfig):
    """App configuration for conversations and realtime messaging (Channels)."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "messaging"
