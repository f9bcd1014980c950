import logging
import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def silence_django_request_logger():
    """Reduce noise from expected 4xx in passing tests.

    Many tests intentionally exercise 400/403 paths to validate permissions
    and input handling. Django logs these at WARNING via 'django.request'.
    Lower that logger to ERROR during tests to avoid clutter.
    """
    logger = logging.getLogger("django.request")
    old = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture(autouse=True)
def reset_throttle_cache():
    """DRF throttles keep their history in the default cache; start each test clean."""
    cache.clear()
    yield
