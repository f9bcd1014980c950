from __future__ import annotations

import pytest
from django.test import Client, override_settings

from challenges.models import Challenge, ChallengeType
from challenges.video_source import VideoData

URL = "/api/cron/daily-video-refresh"


class StubSource:
    def __init__(self):
        self.calls = 0

    def find_video(self, min_duration, max_duration, topics, exclude_ids=()):
        self.calls += 1
        return VideoData(
            video_id=f"cronvid{self.calls:04d}",
            title=f"English video {self.calls}",
            duration=min_duration + 30,
        )


@pytest.mark.django_db
@override_settings(CRON_SECRET="s3cret")
def test_refresh_rejects_missing_or_wrong_secret():
    c = Client()
    assert c.post(URL).status_code == 401
    r = c.post(URL, HTTP_AUTHORIZATION="Bearer nope")
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Unauthorized"}


@pytest.mark.django_db
@override_settings(CRON_SECRET="")
def test_refresh_disabled_without_configured_secret():
    assert Client().post(URL, HTTP_AUTHORIZATION="Bearer ").status_code == 401


@pytest.mark.django_db
@override_settings(CRON_SECRET="s3cret")
def test_refresh_generates_daily_and_practice(monkeypatch):
    monkeypatch.setattr("api.views.get_video_source", StubSource)
    r = Client().post(URL, HTTP_AUTHORIZATION="Bearer s3cret")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["daily_challenge"] is not None
    assert data["practice_challenges"]["count"] == 3
    assert data["errors"] == []
    assert "generated_at" in data
    assert Challenge.objects.filter(challenge_type=ChallengeType.DAILY).count() == 1
    assert Challenge.objects.filter(challenge_type=ChallengeType.PRACTICE).count() == 3

    # A second run on the same day creates nothing new
    r = Client().get(URL, HTTP_AUTHORIZATION="Bearer s3cret")
    assert r.status_code == 200
    assert r.json()["data"]["practice_challenges"]["count"] == 0
    assert Challenge.objects.count() == 4


@pytest.mark.django_db
@override_settings(CRON_SECRET="s3cret", YOUTUBE_API_KEY="")
def test_refresh_reports_unavailable_source():
    r = Client().post(URL, HTTP_AUTHORIZATION="Bearer s3cret")
    assert r.status_code == 500
    assert r.json()["success"] is False
    assert "API key" in r.json()["error"]
