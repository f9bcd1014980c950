from django.apps import AppConfig


class UiConfig(AppConfig):
    """App configuration for the landing view and client-side playback helpers."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ui"
