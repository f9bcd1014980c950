"""API routes for EnglishMastery.

Versioned REST endpoints under /api/v1/, the scheduled refresh hook under
/api/cron/, plus the OpenAPI schema and interactive documentation.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


from .views import (
    ChallengeViewSet,
    ConversationViewSet,
    PostViewSet,
    UserViewSet,
    account_approval,
    account_role,
    comment_delete,
    daily_video_refresh,
    search_users,
)

router = DefaultRouter()
router.register(r"api/v1/users", UserViewSet, basename="users")
router.register(r"api/v1/conversations", ConversationViewSet, basename="conversations")
router.register(r"api/v1/challenges", ChallengeViewSet, basename="challenges")
router.register(r"api/v1/posts", PostViewSet, basename="posts")

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("api/v1/search/users", search_users, name="search-users"),
    path("api/v1/comments/<int:pk>/", comment_delete, name="comment-delete"),
    path("api/v1/admin/users/<int:user_id>/approval/", account_approval, name="account-approval"),
    path("api/v1/admin/users/<int:user_id>/role/", account_role, name="account-role"),
    path("api/cron/daily-video-refresh", daily_video_refresh, name="cron-daily-video-refresh"),
    path("", include(router.urls)),
]
