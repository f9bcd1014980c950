"""Challenge operations: ownership-checked deletion, user-generated
creation, the current-challenge lookup and the daily refresh job."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import DatabaseError
from django.utils import timezone

from accounts.models import Role
from activity.models import Notification
from activity.services import notify_role
from config.results import NOT_FOUND, PERMISSION_DENIED, QUERY_FAILED, VALIDATION, Result

from .models import Challenge, ChallengeType, Difficulty
from .video_source import VideoData, embed_url, thumbnail_url, youtube_video_id

logger = logging.getLogger(__name__)

DAILY_DURATION = (180, 600)
PRACTICE_DURATION = (120, 480)
DAILY_TOPICS = ["english learning", "ted talk", "communication", "business"]
PRACTICE_TOPICS = {
    Difficulty.BEGINNER: [
        "basic english vocabulary",
        "english for beginners",
        "simple english conversation",
        "english pronunciation basics",
        "daily english expressions",
    ],
    Difficulty.INTERMEDIATE: [
        "business english",
        "english idioms",
        "english presentation skills",
        "english conversation practice",
        "english for work",
    ],
    Difficulty.ADVANCED: [
        "advanced english vocabulary",
        "professional english communication",
        "english public speaking",
        "english academic writing",
        "english debate techniques",
    ],
}

_BEGINNER_WORDS = ("beginner", "basic", "simple", "easy", "elementary", "for kids")
_ADVANCED_WORDS = ("advanced", "academic", "professional", "debate", "rhetoric", "lecture")


def classify_difficulty(title: str, description: str = "", duration: int = 0) -> str:
    """Guess a difficulty from keywords, falling back to video length."""
    text = f"{title} {description}".lower()
    if any(w in text for w in _BEGINNER_WORDS):
        return Difficulty.BEGINNER
    if any(w in text for w in _ADVANCED_WORDS):
        return Difficulty.ADVANCED
    if duration and duration <= 240:
        return Difficulty.BEGINNER
    if duration >= 480:
        return Difficulty.ADVANCED
    return Difficulty.INTERMEDIATE


def delete_challenge(challenge_id, user_id) -> Result:
    """Delete a user-generated challenge owned by `user_id`.

    Daily and practice challenges are never deletable through this path.
    """
    try:
        challenge = Challenge.objects.filter(pk=challenge_id).only("id", "challenge_type", "creator_id").first()
        if challenge is None:
            return Result.failure(NOT_FOUND, "Challenge not found.")
        if not challenge.is_user_generated:
            return Result.failure(PERMISSION_DENIED, "Only user-generated challenges can be deleted.")
        if challenge.creator_id is None or str(challenge.creator_id) != str(user_id):
            return Result.failure(PERMISSION_DENIED, "You can only delete challenges you created.")
        challenge.delete()
    except DatabaseError:
        logger.exception("Deleting challenge %s failed", challenge_id)
        return Result.failure(QUERY_FAILED, "Failed to delete challenge.")
    logger.info("Challenge %s deleted by %s", challenge_id, user_id)
    return Result.success({"id": int(challenge_id)})


def create_user_challenge(user_id, data: dict) -> Result:
    title = (data.get("title") or "").strip()
    video_url = (data.get("video_url") or "").strip()
    if not title:
        return Result.failure(VALIDATION, "Title is required.")
    if not video_url:
        return Result.failure(VALIDATION, "Video URL is required.")
    difficulty = data.get("difficulty") or Difficulty.BEGINNER
    if difficulty not in Difficulty.values:
        return Result.failure(VALIDATION, f"Unknown difficulty: {difficulty}")
    try:
        duration = int(data.get("duration") or 0)
    except (TypeError, ValueError):
        return Result.failure(VALIDATION, "Duration must be a whole number of seconds.")
    if duration < 0:
        return Result.failure(VALIDATION, "Duration must not be negative.")
    topics = data.get("topics") or []
    if isinstance(topics, str):
        topics = [t.strip() for t in topics.split(",") if t.strip()]

    video_id = youtube_video_id(video_url) or ""
    try:
        challenge = Challenge.objects.create(
            title=title[:300],
            description=(data.get("description") or "").strip(),
            video_id=video_id,
            video_url=video_url,
            embed_url=data.get("embed_url") or (embed_url(video_id) if video_id else ""),
            thumbnail_url=data.get("thumbnail_url") or (thumbnail_url(video_id) if video_id else ""),
            difficulty=difficulty,
            duration=duration,
            challenge_type=ChallengeType.USER_GENERATED,
            topics=list(topics),
            creator_id=user_id,
        )
    except DatabaseError:
        logger.exception("Creating challenge for %s failed", user_id)
        return Result.failure(QUERY_FAILED, "Failed to create challenge.")
    return Result.success(challenge)


def current_challenge(today: Optional[date] = None) -> Result:
    today = today or timezone.localdate()
    daily = Challenge.objects.filter(challenge_type=ChallengeType.DAILY, is_active=True)
    try:
        challenge = daily.filter(challenge_date=today).order_by("-created_at", "-id").first()
        if challenge is None:
            challenge = daily.order_by("-challenge_date", "-created_at", "-id").first()
    except DatabaseError:
        logger.exception("Loading the current challenge failed")
        return Result.failure(QUERY_FAILED, "Failed to load the current challenge.")
    return Result.success(challenge)


def _save_generated(video: VideoData, challenge_type: str, difficulty: str, today: date, topics: list[str]) -> Challenge:
    return Challenge.objects.create(
        title=video.title[:300],
        description=video.description,
        video_id=video.video_id,
        video_url=video.video_url,
        embed_url=video.embed_url,
        thumbnail_url=video.thumbnail_url or thumbnail_url(video.video_id),
        difficulty=difficulty,
        duration=video.duration,
        challenge_type=challenge_type,
        topics=list(video.topics) or topics[:1],
        challenge_date=today,
    )


def _brief(challenge: Challenge) -> dict:
    return {
        "id": challenge.pk,
        "title": challenge.title,
        "difficulty": challenge.difficulty,
        "challenge_type": challenge.challenge_type,
    }


def refresh_daily_challenges(source, today: Optional[date] = None) -> dict:
    """Generate today's daily challenge and one practice challenge per difficulty.

    Parts that already exist for `today` are skipped. A failing part is
    recorded in `errors` and does not stop the others. Admins are notified
    of the daily outcome.
    """
    today = today or timezone.localdate()
    summary = {"date": today.isoformat(), "daily_challenge": None, "practice_challenges": {"count": 0, "challenges": []}, "errors": []}
    used_ids = set(Challenge.objects.exclude(video_id="").values_list("video_id", flat=True))

    if Challenge.objects.filter(challenge_type=ChallengeType.DAILY, challenge_date=today).exists():
        logger.info("Daily challenge for %s already exists", today)
    else:
        try:
            video = source.find_video(*DAILY_DURATION, DAILY_TOPICS, exclude_ids=used_ids)
            difficulty = classify_difficulty(video.title, video.description, video.duration)
            challenge = _save_generated(video, ChallengeType.DAILY, difficulty, today, DAILY_TOPICS)
            used_ids.add(video.video_id)
            summary["daily_challenge"] = _brief(challenge)
            logger.info("Daily challenge generated: %s", challenge.title)
            notify_role(
                Role.ADMIN,
                Notification.TYPE_CHALLENGE,
                "Video Generated Successfully",
                f'New daily video: "{challenge.title}" ({challenge.duration // 60}min)',
                link=f"/api/v1/challenges/{challenge.pk}/",
            )
        except Exception as e:
            logger.exception("Daily challenge generation failed")
            summary["errors"].append(f"Daily: {e}")
            notify_role(
                Role.ADMIN,
                Notification.TYPE_CHALLENGE,
                "Video Generation Failed",
                f"Failed to generate daily video: {e}",
            )

    for difficulty, topics in PRACTICE_TOPICS.items():
        exists = Challenge.objects.filter(
            challenge_type=ChallengeType.PRACTICE, difficulty=difficulty, challenge_date=today
        ).exists()
        if exists:
            logger.info("%s practice challenge for %s already exists", difficulty.value, today)
            continue
        try:
            video = source.find_video(*PRACTICE_DURATION, topics, exclude_ids=used_ids)
            challenge = _save_generated(video, ChallengeType.PRACTICE, difficulty, today, topics)
            used_ids.add(video.video_id)
            summary["practice_challenges"]["challenges"].append(_brief(challenge))
        except Exception as e:
            logger.exception("%s practice challenge generation failed", difficulty.value)
            summary["errors"].append(f"Practice {difficulty.value}: {e}")

    summary["practice_challenges"]["count"] = len(summary["practice_challenges"]["challenges"])
    return summary
