from __future__ import annotations

from django.test import TestCase
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from accounts.models import Role


class ApiSmokeTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="a1", password="pw", email="a1@example.com")
        self.admin.profile.role = Role.ADMIN
        self.admin.profile.save(update_fields=["role"])

        self.member = User.objects.create_user(username="m1", password="pw", email="m1@example.com")
        self.client = APIClient()

    def test_schema_available(self):
        r = self.client.get("/api/schema/")
        assert r.status_code == 200

    def test_public_lists(self):
        assert self.client.get("/api/v1/challenges/").status_code == 200
        assert self.client.get("/api/v1/posts/").status_code == 200

    def test_conversations_require_login(self):
        r = self.client.get("/api/v1/conversations/")
        assert r.status_code in (401, 403)

    def test_user_search_requires_admin(self):
        assert self.client.login(username="m1", password="pw")
        r = self.client.get("/api/v1/search/users", {"q": "m"})
        assert r.status_code == 403
        self.client.logout()

        assert self.client.login(username="a1", password="pw")
        r = self.client.get("/api/v1/search/users", {"q": "m1@"})
        assert r.status_code == 200
        body = r.json()
        assert body["count"] == 1
        assert body["results"][0]["id"] == self.member.id

    def test_user_search_by_full_name(self):
        self.member.profile.full_name = "Maria Lopez"
        self.member.profile.save(update_fields=["full_name"])
        self.client.force_authenticate(user=self.admin)
        r = self.client.get("/api/v1/search/users", {"q": "lopez"})
        assert [u["display_name"] for u in r.json()["results"]] == ["Maria Lopez"]
