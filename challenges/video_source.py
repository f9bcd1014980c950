"""Video lookup for generated challenges (YouTube Data API v3).

The refresh job only needs one thing from a source: "give me an
embeddable English video on one of these topics whose length falls in
this range and that we have not used before". Anything with a matching
`find_video` method can stand in for `YouTubeVideoSource`.
"""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol
from urllib.parse import parse_qs, urlparse

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)
_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{6,32}$")


class VideoSourceError(Exception):
    """Raised when no suitable video could be obtained."""


def parse_iso8601_duration(value: str) -> int:
    """Convert an ISO 8601 duration such as `PT4M13S` to seconds."""
    match = _DURATION_RE.match((value or "").strip())
    if not match or value.strip() in ("P", "PT"):
        raise ValueError(f"Invalid ISO 8601 duration: {value!r}")
    parts = {k: int(v) if v else 0 for k, v in match.groupdict().items()}
    return parts["days"] * 86400 + parts["hours"] * 3600 + parts["minutes"] * 60 + parts["seconds"]


def youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id from watch, short-link, embed or shorts URLs."""
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return None
    host = (parsed.hostname or "").lower()
    candidate = None
    if host in ("youtu.be", "www.youtu.be"):
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host.endswith("youtube.com") or host.endswith("youtube-nocookie.com"):
        if parsed.path == "/watch":
            candidate = (parse_qs(parsed.query).get("v") or [None])[0]
        else:
            segments = [s for s in parsed.path.split("/") if s]
            if len(segments) >= 2 and segments[0] in ("embed", "shorts", "live", "v"):
                candidate = segments[1]
    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


def thumbnail_url(video_id: str) -> str:
    return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"


@dataclass(frozen=True)
class VideoData:
    video_id: str
    title: str
    duration: int
    description: str = ""
    thumbnail_url: str = ""
    topics: tuple = field(default_factory=tuple)

    @property
    def video_url(self) -> str:
        return watch_url(self.video_id)

    @property
    def embed_url(self) -> str:
        return embed_url(self.video_id)


class VideoSource(Protocol):
    def find_video(
        self, min_duration: int, max_duration: int, topics: list[str], exclude_ids: Iterable[str] = ()
    ) -> VideoData: ...


class YouTubeVideoSource:
    """Search YouTube for a video on a random topic within a duration range."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = 8,
        max_results: int = 15,
        rng: Optional[random.Random] = None,
    ):
        if not api_key:
            raise VideoSourceError("A YouTube API key is required.")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.base_url = (base_url or getattr(settings, "YOUTUBE_API_URL", "https://www.googleapis.com/youtube/v3")).rstrip("/")
        self.timeout = timeout
        self.max_results = max_results
        self.rng = rng or random.Random()

    def _get(self, endpoint: str, params: dict) -> dict:
        try:
            response = self.session.get(
                f"{self.base_url}/{endpoint}",
                params={**params, "key": self.api_key},
                timeout=self.timeout,
                headers={"User-Agent": "EnglishMastery/1.0 (challenge refresh)"},
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.warning("YouTube %s request failed: %s", endpoint, e)
            raise VideoSourceError(f"YouTube {endpoint} request failed: {e}") from e
        except ValueError as e:
            raise VideoSourceError(f"YouTube {endpoint} returned invalid JSON") from e

    def search(self, query: str) -> list[str]:
        data = self._get(
            "search",
            {
                "part": "snippet",
                "q": query,
                "type": "video",
                "videoEmbeddable": "true",
                "relevanceLanguage": "en",
                "safeSearch": "strict",
                "maxResults": self.max_results,
            },
        )
        ids = []
        for item in data.get("items", []):
            vid = (item.get("id") or {}).get("videoId")
            if vid and vid not in ids:
                ids.append(vid)
        return ids

    def details(self, video_ids: list[str], topic: str = "") -> list[VideoData]:
        if not video_ids:
            return []
        data = self._get("videos", {"part": "snippet,contentDetails", "id": ",".join(video_ids)})
        videos = []
        for item in data.get("items", []):
            snippet = item.get("snippet") or {}
            try:
                duration = parse_iso8601_duration((item.get("contentDetails") or {}).get("duration", ""))
            except ValueError:
                continue
            thumbs = snippet.get("thumbnails") or {}
            thumb = next((thumbs[k]["url"] for k in ("high", "medium", "default") if k in thumbs), thumbnail_url(item["id"]))
            videos.append(
                VideoData(
                    video_id=item["id"],
                    title=snippet.get("title") or "Untitled video",
                    description=snippet.get("description") or "",
                    duration=duration,
                    thumbnail_url=thumb,
                    topics=(topic,) if topic else (),
                )
            )
        return videos

    def find_video(
        self, min_duration: int, max_duration: int, topics: list[str], exclude_ids: Iterable[str] = ()
    ) -> VideoData:
        excluded = set(exclude_ids)
        topic = self.rng.choice(topics) if topics else "english learning"
        candidates = [vid for vid in self.search(topic) if vid not in excluded]
        for video in self.details(candidates, topic=topic):
            if min_duration <= video.duration <= max_duration:
                return video
            logger.debug("Skipping %s: %ss outside %s-%s", video.video_id, video.duration, min_duration, max_duration)
        raise VideoSourceError(f"No unused video between {min_duration}s and {max_duration}s for topic {topic!r}")


def get_video_source() -> YouTubeVideoSource:
    return YouTubeVideoSource(getattr(settings, "YOUTUBE_API_KEY", ""))
