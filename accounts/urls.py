from django.urls import path

from .views import me, pending_accounts

app_name = "accounts"

urlpatterns = [
    path("me/", me, name="me"),
    path("pending/", pending_accounts, name="pending"),
]
