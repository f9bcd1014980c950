from __future__ import annotations

from datetime import date, timedelta

import pytest
from django.contrib.auth.models import User

from accounts.models import Role
from activity.models import Notification
from challenges.models import Challenge, ChallengeType, Difficulty
from challenges.services import (
    classify_difficulty,
    create_user_challenge,
    current_challenge,
    delete_challenge,
    refresh_daily_challenges,
)
from challenges.video_source import VideoData, VideoSourceError

TODAY = date(2024, 6, 3)


def _challenge(challenge_type: str, creator=None, **extra) -> Challenge:
    fields = {
        "title": f"{challenge_type} video",
        "video_url": "https://www.youtube.com/watch?v=abcdef12345",
        "challenge_type": challenge_type,
        "creator": creator,
    }
    fields.update(extra)
    return Challenge.objects.create(**fields)


@pytest.mark.django_db
@pytest.mark.parametrize("challenge_type", [ChallengeType.DAILY, ChallengeType.PRACTICE])
def test_generated_challenges_cannot_be_deleted_by_anyone(challenge_type):
    admin = User.objects.create_superuser(username="root", password="pw", email="root@example.com")
    c = _challenge(challenge_type)
    result = delete_challenge(c.id, admin.id)
    assert result.error.code == "permission_denied"
    assert Challenge.objects.filter(pk=c.id).exists()


@pytest.mark.django_db
def test_user_generated_challenge_deletable_only_by_owner():
    owner = User.objects.create_user(username="owner", password="pw")
    other = User.objects.create_user(username="other", password="pw")
    c = _challenge(ChallengeType.USER_GENERATED, creator=owner)

    assert delete_challenge(c.id, other.id).error.code == "permission_denied"
    assert Challenge.objects.filter(pk=c.id).exists()

    result = delete_challenge(c.id, owner.id)
    assert result.ok and result.data == {"id": c.id}
    assert not Challenge.objects.filter(pk=c.id).exists()
    assert delete_challenge(c.id, owner.id).error.code == "not_found"


@pytest.mark.django_db
def test_create_user_challenge_derives_youtube_urls():
    u = User.objects.create_user(username="maker", password="pw")
    result = create_user_challenge(
        u.id,
        {"title": " Idioms ", "video_url": "https://youtu.be/dQw4w9WgXcQ", "difficulty": "intermediate", "topics": "idioms, work"},
    )
    assert result.ok
    c = result.data
    assert c.title == "Idioms"
    assert c.challenge_type == ChallengeType.USER_GENERATED
    assert c.creator_id == u.id
    assert c.video_id == "dQw4w9WgXcQ"
    assert c.embed_url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert c.topics == ["idioms", "work"]


@pytest.mark.django_db
def test_create_user_challenge_validation():
    u = User.objects.create_user(username="maker2", password="pw")
    assert create_user_challenge(u.id, {"video_url": "https://youtu.be/x"}).error.code == "validation"
    assert create_user_challenge(u.id, {"title": "t"}).error.code == "validation"
    bad = {"title": "t", "video_url": "https://example.com/v.mp4", "difficulty": "expert"}
    assert create_user_challenge(u.id, bad).error.code == "validation"
    other_host = create_user_challenge(u.id, {"title": "t", "video_url": "https://example.com/v.mp4"})
    assert other_host.ok and other_host.data.video_id == "" and other_host.data.embed_url == ""


@pytest.mark.django_db
def test_current_challenge_prefers_today_then_latest():
    assert current_challenge(TODAY).data is None
    older = _challenge(ChallengeType.DAILY, challenge_date=TODAY - timedelta(days=2))
    _challenge(ChallengeType.DAILY, challenge_date=TODAY - timedelta(days=1), is_active=False)
    assert current_challenge(TODAY).data == older
    todays = _challenge(ChallengeType.DAILY, challenge_date=TODAY)
    _challenge(ChallengeType.PRACTICE, challenge_date=TODAY)
    assert current_challenge(TODAY).data == todays


def test_classify_difficulty_keywords_then_duration():
    assert classify_difficulty("English for Beginners") == Difficulty.BEGINNER
    assert classify_difficulty("Academic writing masterclass") == Difficulty.ADVANCED
    assert classify_difficulty("Travel talk", duration=200) == Difficulty.BEGINNER
    assert classify_difficulty("Travel talk", duration=300) == Difficulty.INTERMEDIATE
    assert classify_difficulty("Travel talk", duration=540) == Difficulty.ADVANCED


class StubSource:
    """Hands out sequential fake videos; topics matching `fail_on` raise."""

    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.calls = []

    def find_video(self, min_duration, max_duration, topics, exclude_ids=()):
        self.calls.append((min_duration, max_duration, list(topics), set(exclude_ids)))
        if self.fail_on and self.fail_on in topics:
            raise VideoSourceError("quota exceeded")
        n = len(self.calls)
        return VideoData(video_id=f"vid{n:08d}", title=f"Video {n}", duration=min_duration + 30, topics=(topics[0],))


def _admin():
    admin = User.objects.create_user(username="adm", password="pw")
    admin.profile.role = Role.ADMIN
    admin.profile.save(update_fields=["role"])
    return admin


@pytest.mark.django_db
def test_refresh_creates_daily_and_three_practice_challenges():
    admin = _admin()
    source = StubSource()
    summary = refresh_daily_challenges(source, today=TODAY)

    assert summary["date"] == "2024-06-03"
    assert summary["errors"] == []
    assert summary["daily_challenge"]["challenge_type"] == "daily"
    assert summary["practice_challenges"]["count"] == 3
    assert {c["difficulty"] for c in summary["practice_challenges"]["challenges"]} == {"beginner", "intermediate", "advanced"}

    assert source.calls[0][:2] == (180, 600)
    assert all(call[:2] == (120, 480) for call in source.calls[1:])
    assert "vid00000001" in source.calls[1][3]

    assert Challenge.objects.filter(challenge_type=ChallengeType.PRACTICE, challenge_date=TODAY).count() == 3
    assert Notification.objects.filter(user=admin, title="Video Generated Successfully").count() == 1

    again = refresh_daily_challenges(source, today=TODAY)
    assert again["daily_challenge"] is None
    assert again["practice_challenges"]["count"] == 0
    assert len(source.calls) == 4


@pytest.mark.django_db
def test_refresh_collects_failures_without_stopping():
    admin = _admin()
    summary = refresh_daily_challenges(StubSource(fail_on="ted talk"), today=TODAY)
    assert summary["daily_challenge"] is None
    assert summary["practice_challenges"]["count"] == 3
    assert summary["errors"] == ["Daily: quota exceeded"]
    assert Notification.objects.filter(user=admin, title="Video Generation Failed").exists()

    partial = refresh_daily_challenges(StubSource(fail_on="english idioms"), today=TODAY + timedelta(days=1))
    assert partial["daily_challenge"] is not None
    assert partial["practice_challenges"]["count"] == 2
    assert partial["errors"] == ["Practice intermediate: quota exceeded"]
