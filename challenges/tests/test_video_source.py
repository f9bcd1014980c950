from __future__ import annotations

import random

import pytest
import requests

from challenges.video_source import (
    VideoSourceError,
    YouTubeVideoSource,
    parse_iso8601_duration,
    youtube_video_id,
)


@pytest.mark.parametrize(
    "value,seconds",
    [("PT4M13S", 253), ("PT10M", 600), ("PT1H2M3S", 3723), ("PT45S", 45), ("P1DT1S", 86401)],
)
def test_parse_iso8601_duration(value, seconds):
    assert parse_iso8601_duration(value) == seconds


@pytest.mark.parametrize("value", ["", "PT", "4M13S", "PTXM"])
def test_parse_iso8601_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_iso8601_duration(value)


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtube.com/shorts/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://vimeo.com/12345678", None),
        ("not a url", None),
    ],
)
def test_youtube_video_id(url, expected):
    assert youtube_video_id(url) == expected


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def get(self, url, params=None, timeout=None, headers=None):
        self.requests.append((url, params, timeout))
        endpoint = url.rsplit("/", 1)[-1]
        return self.responses[endpoint]


def _video(vid, duration, title="Talk"):
    return {
        "id": vid,
        "snippet": {"title": title, "description": "d", "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{vid}/hq.jpg"}}},
        "contentDetails": {"duration": duration},
    }


def test_find_video_filters_by_duration_and_used_ids():
    session = FakeSession(
        {
            "search": FakeResponse({"items": [{"id": {"videoId": v}} for v in ("used1", "short1", "good1", "good2")]}),
            "videos": FakeResponse({"items": [_video("short1", "PT1M"), _video("good1", "PT5M", "Good talk"), _video("good2", "PT6M")]}),
        }
    )
    source = YouTubeVideoSource("key", session=session, base_url="https://yt.test/v3", rng=random.Random(1))
    video = source.find_video(180, 600, ["business english"], exclude_ids={"used1"})

    assert video.video_id == "good1"
    assert video.duration == 300
    assert video.title == "Good talk"
    assert video.embed_url == "https://www.youtube.com/embed/good1"
    assert video.topics == ("business english",)
    search_url, search_params, timeout = session.requests[0]
    assert search_url == "https://yt.test/v3/search"
    assert search_params["q"] == "business english"
    assert search_params["key"] == "key"
    assert timeout == 8
    assert session.requests[1][1]["id"] == "short1,good1,good2"


def test_find_video_raises_when_nothing_fits():
    session = FakeSession(
        {
            "search": FakeResponse({"items": [{"id": {"videoId": "long1"}}]}),
            "videos": FakeResponse({"items": [_video("long1", "PT1H")]}),
        }
    )
    source = YouTubeVideoSource("key", session=session, base_url="https://yt.test/v3")
    with pytest.raises(VideoSourceError):
        source.find_video(120, 480, ["english idioms"])


def test_http_errors_surface_as_video_source_error():
    session = FakeSession({"search": FakeResponse({}, status=403)})
    source = YouTubeVideoSource("key", session=session, base_url="https://yt.test/v3")
    with pytest.raises(VideoSourceError):
        source.find_video(120, 480, ["english idioms"])


def test_missing_api_key_is_an_error():
    with pytest.raises(VideoSourceError):
        YouTubeVideoSource("")
