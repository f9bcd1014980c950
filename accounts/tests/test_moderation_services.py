from __future__ import annotations

import pytest
from django.contrib.auth.models import User
from django.db import DatabaseError

from accounts.models import ApprovalStatus, Role
from accounts.services import approve_account, change_role, deactivate_account, reject_account
from activity.models import Notification


@pytest.fixture
def admin(db):
    a = User.objects.create_user(username="adm", password="pw")
    a.profile.role = Role.ADMIN
    a.profile.save(update_fields=["role"])
    return a


@pytest.mark.django_db
def test_new_profiles_start_pending_members():
    u = User.objects.create_user(username="fresh", password="pw")
    assert u.profile.role == Role.MEMBER
    assert u.profile.approval_status == ApprovalStatus.PENDING


@pytest.mark.django_db
def test_superuser_starts_as_approved_admin():
    su = User.objects.create_superuser(username="root", password="pw", email="root@example.com")
    assert su.profile.role == Role.ADMIN
    assert su.profile.approval_status == ApprovalStatus.APPROVED


@pytest.mark.django_db
def test_non_admin_cannot_moderate():
    member = User.objects.create_user(username="m", password="pw")
    target = User.objects.create_user(username="t", password="pw")
    assert approve_account(target.id, member.id).error.code == "permission_denied"
    assert change_role(target.id, Role.ADMIN, member.id).error.code == "permission_denied"


@pytest.mark.django_db
def test_reject_then_approve_restores_account(admin):
    u = User.objects.create_user(username="u", password="pw")
    assert reject_account(u.id, admin.id, "  duplicate  ").ok
    u.refresh_from_db()
    assert not u.is_active
    assert u.profile.approval_reason == "duplicate"

    result = approve_account(u.id, admin.id)
    assert result.data == {"user_id": u.id, "approval_status": ApprovalStatus.APPROVED}
    u.refresh_from_db()
    assert u.is_active
    assert u.profile.approval_reason == ""
    titles = list(Notification.objects.filter(user=u).values_list("title", flat=True))
    assert "Account rejected" in titles and "Account approved" in titles


@pytest.mark.django_db
def test_admin_self_protection(admin):
    assert reject_account(admin.id, admin.id).error.code == "validation"
    assert deactivate_account(admin.id, admin.id).error.code == "validation"
    assert change_role(admin.id, Role.MEMBER, admin.id).error.code == "validation"
    assert change_role(admin.id, Role.ADMIN, admin.id).ok


@pytest.mark.django_db
def test_missing_user_is_not_found(admin):
    assert approve_account(424242, admin.id).error.code == "not_found"
    assert deactivate_account(424242, admin.id).error.code == "not_found"


@pytest.mark.django_db
def test_deactivate_notifies_the_user(admin):
    target = User.objects.create_user(username="leaving", password="pw")
    result = deactivate_account(target.id, admin.id)
    assert result.data == {"user_id": target.id, "is_active": False}
    n = Notification.objects.get(user=target, type=Notification.TYPE_ACCOUNT)
    assert n.title == "Account deactivated"
    assert n.actor_id == admin.id


@pytest.mark.django_db
def test_admin_check_failure_is_reported_as_query_failed(admin, monkeypatch):
    target = User.objects.create_user(username="t2", password="pw")

    def broken(user_id):
        raise DatabaseError("connection lost")

    monkeypatch.setattr("accounts.services._is_admin", broken)
    assert approve_account(target.id, admin.id).error.code == "query_failed"
    assert reject_account(target.id, admin.id).error.code == "query_failed"
    assert change_role(target.id, Role.TEACHER, admin.id).error.code == "query_failed"
    assert deactivate_account(target.id, admin.id).error.code == "query_failed"
