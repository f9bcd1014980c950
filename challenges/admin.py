from django.contrib import admin

from .models import Challenge


@admin.register(Challenge)
class ChallengeAdmin(admin.ModelAdmin):
    list_display = ("title", "challenge_type", "difficulty", "challenge_date", "is_active", "featured", "creator")
    list_filter = ("challenge_type", "difficulty", "is_active", "featured")
    search_fields = ("title", "description", "video_id")
    date_hierarchy = "created_at"
