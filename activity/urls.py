from django.urls import path
from .views import notifications_recent, notification_mark_read, notifications_mark_all_read

app_name = "activity"

urlpatterns = [
    path("notifications/recent/", notifications_recent, name="notifications-recent"),
    path("notifications/<int:pk>/read/", notification_mark_read, name="notification-mark-read"),
    path("notifications/mark-all-read/", notifications_mark_all_read, name="notifications-mark-all-read"),
]
