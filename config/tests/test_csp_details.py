from __future__ import annotations

import pytest
from django.test import Client


@pytest.mark.django_db
def test_csp_has_expected_directives():
    c = Client()
    r = c.get("/")
    assert r.status_code == 200
    csp = r.headers.get("Content-Security-Policy", "")
    assert csp
    # No unsafe-inline
    assert "'unsafe-inline'" not in csp
    # DiceBear avatars, YouTube thumbnails and data images allowed
    assert "img-src" in csp and "api.dicebear.com" in csp and "i.ytimg.com" in csp
    assert "data:" in csp
    # Challenge videos are embedded from YouTube
    assert "frame-src" in csp and "https://www.youtube.com" in csp
    # Allow ws/wss for Channels
    assert "connect-src" in csp and ("ws:" in csp or "wss:" in csp)
    # Disallow framing
    assert "frame-ancestors 'none'" in csp
