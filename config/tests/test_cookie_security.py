from __future__ import annotations

import pytest
from django.contrib.auth.models import User
from django.test import Client, override_settings
from django.conf import settings


def _admin_login(username: str) -> Client:
    User.objects.create_user(username=username, password='pw', is_staff=True)
    c = Client()
    r = c.post('/admin/login/', {'username': username, 'password': 'pw', 'next': '/admin/'})
    # Expect redirect on successful login
    assert r.status_code in (302, 301)
    return c


@pytest.mark.django_db
@pytest.mark.security
@override_settings(SESSION_COOKIE_SAMESITE='Lax', SESSION_COOKIE_SECURE=True)
def test_session_cookie_flags_secure_lax_httponly_on_login_response():
    c = _admin_login('cook')
    morsel = c.cookies.get(settings.SESSION_COOKIE_NAME)
    assert morsel is not None
    assert bool(morsel['httponly']) is True
    assert (morsel['samesite'] or '').lower() == 'lax'
    assert bool(morsel['secure']) is True


@pytest.mark.django_db
@pytest.mark.security
@override_settings(SESSION_COOKIE_SAMESITE='Lax', SESSION_COOKIE_SECURE=False)
def test_session_cookie_flags_lax_without_secure_when_not_forced():
    c = _admin_login('cook2')
    morsel = c.cookies.get(settings.SESSION_COOKIE_NAME)
    assert morsel is not None
    assert bool(morsel['httponly']) is True
    assert (morsel['samesite'] or '').lower() == 'lax'
    assert bool(morsel['secure']) is False
