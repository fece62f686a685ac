"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from fetcher.http_fetcher import PageFetcher
from fetcher.models import FetchResult
from monitor.models import Snapshot, SnapshotEntry, Target
from monitor.snapshot_store import SnapshotStore


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def sample_html_content():
    """Sample HTML page for extraction tests."""
    return """
    <html>
        <head><title>Release notes</title></head>
        <body>
            <h1>Latest release</h1>
            <div id="content">
                <p class="version">Version 2.4.1</p>
                <p class="date">Released 2024-01-15</p>
            </div>
            <ul class="changelog">
                <li>Fixed crash on startup</li>
                <li>Improved performance</li>
            </ul>
            <div class="empty"></div>
        </body>
    </html>
    """


@pytest.fixture
def sample_target():
    """A monitored website with a CSS selector."""
    return Target(
        name="Example Releases",
        url="https://example.com/releases",
        selector="#content",
        tags=["releases"]
    )


@pytest.fixture
def full_page_target():
    """A monitored website without a selector."""
    return Target(name="Example Home", url="https://example.com/")


@pytest.fixture
def snapshot_store(tmp_path):
    """Snapshot store in a temporary directory."""
    return SnapshotStore(tmp_path / "snapshots")


@pytest.fixture
def sample_snapshot():
    """A stored snapshot with one previous entry."""
    return Snapshot(
        url="https://example.com/releases",
        name="Example Releases",
        current=SnapshotEntry(
            timestamp=datetime(2024, 1, 14, 12, 0, tzinfo=timezone.utc),
            content="Version 2.4.0",
            hash="a" * 64,
            status=200
        ),
        previous=SnapshotEntry(
            timestamp=datetime(2024, 1, 13, 12, 0, tzinfo=timezone.utc),
            content="Version 2.3.9",
            hash="b" * 64,
            status=200
        ),
        last_check=datetime(2024, 1, 14, 12, 0, tzinfo=timezone.utc),
        change_count=2,
        error_count=1,
        selector="#content"
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_fetcher():
    """Page fetcher returning a fixed successful page."""
    fetcher = AsyncMock(spec=PageFetcher)
    fetcher.fetch.return_value = FetchResult(content="Hello", status_code=200)
    return fetcher


@pytest.fixture
def no_sleep():
    """Sleep replacement recording requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def mock_transport_factory():
    """Build an httpx MockTransport from a request handler, recording requests."""
    def factory(handler):
        requests = []

        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(record)
        transport.requests = requests
        return transport

    return factory
