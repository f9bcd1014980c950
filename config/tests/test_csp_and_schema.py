from __future__ import annotations

import pytest
from django.test import Client


@pytest.mark.django_db
def test_csp_header_on_index():
    r = Client().get('/')
    assert r.status_code == 200
    csp = r.headers['Content-Security-Policy']
    assert "frame-ancestors 'none'" in csp
    assert 'wss:' in csp


@pytest.mark.django_db
def test_openapi_schema_and_docs_available():
    c = Client()
    r = c.get('/api/schema/')
    assert r.status_code == 200
    assert 'openapi' in r.content.decode('utf-8', errors='ignore').lower()
    assert c.get('/docs/').status_code == 200
