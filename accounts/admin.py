from django.contrib import admin

from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "full_name", "username", "approval_status", "level", "points")
    list_filter = ("role", "approval_status")
    search_fields = ("user__email", "user__username", "full_name", "username")
