"""Pytest configuration and shared fixtures for gold rate tracker tests."""
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest

from goldrate_tracker.models import RateEntry
from goldrate_tracker.services.snapshot_store import InMemorySnapshotBackend, SnapshotStore


@pytest.fixture(autouse=True)
def mock_time_sleep():
    """Automatically patch time.sleep to speed up tests."""
    with patch('time.sleep'):
        yield


@pytest.fixture
def mock_fetcher_session():
    """Patch requests.Session to return a mock session for all fetchers."""
    with patch('goldrate_tracker.fetchers.base.requests.Session') as mock_session_class:
        mock_sess = Mock()
        mock_sess.get = Mock()
        mock_sess.close = Mock()
        mock_sess.headers = Mock()
        mock_sess.headers.update = Mock()
        mock_sess.mount = Mock()
        mock_session_class.return_value = mock_sess
        yield mock_sess


@pytest.fixture
def base_time():
    """Fixed reference time used for captured_at values."""
    return datetime(2025, 3, 10, 4, 0, tzinfo=timezone.utc)


@pytest.fixture
def initial_rates():
    """First upstream fetch: 999 and 750 purities."""
    return [
        RateEntry(code="999", label="999", price=25000),
        RateEntry(code="750", label="750", price=19000),
    ]


@pytest.fixture
def changed_rates():
    """Same codes as initial_rates with a new 999 price."""
    return [
        RateEntry(code="999", label="999", price=25500),
        RateEntry(code="750", label="750", price=19000),
    ]


@pytest.fixture
def sample_payload():
    """Raw upstream JSON payload as returned by the rates endpoint."""
    return [
        {"code": "999", "label": "999", "price": 25000},
        {"code": "750", "label": "750", "price": 19000},
        {"code": "585", "label": "585", "price": 14800},
    ]


@pytest.fixture
def memory_store():
    """Snapshot store over an in-memory backend."""
    return SnapshotStore(InMemorySnapshotBackend())
