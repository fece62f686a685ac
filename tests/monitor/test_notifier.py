"""
Unit tests for ntfy notifications.
"""

import json

import httpx
import pytest

from monitor.exceptions import NotificationError
from monitor.models import ChangeResult, NotificationMessage, Target
from monitor.notifier import NtfyNotifier


@pytest.fixture
def urgent_target():
    return Target(
        name="Status Page",
        url="https://status.example.com/",
        priority="urgent",
        tags=["ops", "status"]
    )


def make_notifier(transport=None):
    return NtfyNotifier(
        server="https://ntfy.example.com",
        topic="site-changes",
        snapshots_dir="snapshots",
        transport=transport
    )


class TestMessageConstruction:
    """Test cases for notification message construction."""

    def test_first_run_message(self, urgent_target):
        result = ChangeResult(
            url=urgent_target.url,
            name=urgent_target.name,
            is_first_run=True,
            new_hash="f" * 64
        )

        message = make_notifier().build_change_message(result, urgent_target, "status-example-comindex")

        assert message.topic == "site-changes"
        assert message.title == "✅ Initial snapshot: Status Page"
        assert "Initial snapshot created for https://status.example.com/" in message.message
        assert f"Content hash: {'f' * 64}" in message.message
        assert message.priority == 5
        assert message.tags == ["ops", "status", "changedetection", "initial"]
        assert message.click == "https://status.example.com/"

    def test_change_message_includes_diff(self, sample_target):
        result = ChangeResult(
            url=sample_target.url,
            name=sample_target.name,
            changed=True,
            old_hash="a" * 64,
            new_hash="b" * 64,
            diff="Changes summary: 1 additions, 1 deletions\n\n- old\n+ new"
        )

        message = make_notifier().build_change_message(result, sample_target, "example-comreleases")

        assert message.title == "📢 Change detected: Example Releases"
        assert "Snapshot: snapshots/example-comreleases.json" in message.message
        assert message.message.endswith("- old\n+ new")
        assert message.priority == 3
        assert message.tags == ["releases", "changedetection", "changed"]

    def test_error_message(self, sample_target):
        message = make_notifier().build_error_message(sample_target, "HTTP 404: Not Found")

        assert message.title == "❌ Failed to fetch: Example Releases"
        assert "Failed to fetch https://example.com/releases" in message.message
        assert "Error: HTTP 404: Not Found" in message.message
        assert message.priority == 5
        assert message.tags == ["releases", "error"]
        assert message.click == sample_target.url


class TestSend:
    """Test cases for NtfyNotifier.send."""

    @pytest.mark.asyncio
    async def test_posts_json_payload(self, mock_transport_factory):
        transport = mock_transport_factory(lambda request: httpx.Response(200, json={"id": "abc"}))
        notifier = make_notifier(transport)
        message = NotificationMessage(
            topic="site-changes",
            title="Title",
            message="Body",
            priority=4,
            tags=["a"],
            click="https://example.com/"
        )

        await notifier.send(message)

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.host == "ntfy.example.com"
        assert json.loads(request.content) == {
            "topic": "site-changes",
            "title": "Title",
            "message": "Body",
            "priority": 4,
            "tags": ["a"],
            "click": "https://example.com/",
        }

    @pytest.mark.asyncio
    async def test_rejected_message_raises(self, mock_transport_factory):
        transport = mock_transport_factory(lambda request: httpx.Response(429))
        notifier = make_notifier(transport)

        with pytest.raises(NotificationError, match="ntfy returned 429"):
            await notifier.send(NotificationMessage(topic="t", title="x", message="y"))

    @pytest.mark.asyncio
    async def test_unreachable_server_raises(self, mock_transport_factory):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        notifier = make_notifier(mock_transport_factory(handler))

        with pytest.raises(NotificationError, match="Failed to reach ntfy server"):
            await notifier.send(NotificationMessage(topic="t", title="x", message="y"))

    @pytest.mark.asyncio
    async def test_send_error_notification(self, mock_transport_factory, sample_target):
        transport = mock_transport_factory(lambda request: httpx.Response(200))
        notifier = make_notifier(transport)

        await notifier.send_error_notification(sample_target, "HTTP 500: Internal Server Error")

        payload = json.loads(transport.requests[0].content)
        assert payload["title"] == "❌ Failed to fetch: Example Releases"
        assert payload["priority"] == 5
