from django.apps import AppConfig


class ChallengesConfig(AppConfig):
    """App configuration for video challenges and the daily refresh."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "challenges"
