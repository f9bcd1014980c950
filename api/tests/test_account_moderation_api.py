from __future__ import annotations

import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from accounts.models import ApprovalStatus, Role


@pytest.fixture
def admin_client(db):
    admin = User.objects.create_user(username="boss", password="pw", email="boss@example.com")
    admin.profile.role = Role.ADMIN
    admin.profile.save(update_fields=["role"])
    c = APIClient()
    c.force_authenticate(user=admin)
    c.admin = admin
    return c


@pytest.mark.django_db
def test_approve_and_reject(admin_client):
    u = User.objects.create_user(username="newbie", password="pw")
    r = admin_client.post(f"/api/v1/admin/users/{u.id}/approval/", {"action": "approve"}, format="json")
    assert r.status_code == 200
    assert r.json()["data"]["approval_status"] == ApprovalStatus.APPROVED

    r = admin_client.post(f"/api/v1/admin/users/{u.id}/approval/", {"action": "reject", "reason": "spam"}, format="json")
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.is_active is False
    assert u.profile.approval_reason == "spam"


@pytest.mark.django_db
def test_moderation_requires_admin_role():
    member = User.objects.create_user(username="plain", password="pw")
    target = User.objects.create_user(username="target", password="pw")
    c = APIClient()
    c.force_authenticate(user=member)
    assert c.post(f"/api/v1/admin/users/{target.id}/approval/", {"action": "approve"}, format="json").status_code == 403
    assert c.post(f"/api/v1/admin/users/{target.id}/role/", {"role": "admin"}, format="json").status_code == 403


@pytest.mark.django_db
def test_role_change_and_guards(admin_client):
    u = User.objects.create_user(username="promo", password="pw")
    r = admin_client.post(f"/api/v1/admin/users/{u.id}/role/", {"role": Role.TEACHER}, format="json")
    assert r.status_code == 200
    u.profile.refresh_from_db()
    assert u.profile.role == Role.TEACHER

    assert admin_client.post(f"/api/v1/admin/users/{u.id}/role/", {"role": "wizard"}, format="json").status_code == 400
    r = admin_client.post(f"/api/v1/admin/users/{admin_client.admin.id}/role/", {"role": Role.MEMBER}, format="json")
    assert r.status_code == 400
    assert admin_client.post("/api/v1/admin/users/99999/role/", {"role": Role.TEACHER}, format="json").status_code == 404


@pytest.mark.django_db
def test_deactivate(admin_client):
    u = User.objects.create_user(username="gone", password="pw")
    r = admin_client.post(f"/api/v1/admin/users/{u.id}/approval/", {"action": "deactivate"}, format="json")
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.is_active is False
