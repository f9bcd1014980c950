"""URL routing for EnglishMastery.

Session-authenticated JSON views live under their app prefixes; the REST
API, the cron endpoint and the OpenAPI schema are mounted from `api.urls`.
"""
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("accounts.urls")),
    path("activity/", include("activity.urls")),
    path("messaging/", include("messaging.urls")),
    path("", include("ui.urls")),  # public index
    # REST API, cron hook, schema and docs
    path("", include("api.urls")),
]
