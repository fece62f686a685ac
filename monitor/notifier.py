"""
Push notifications for detected changes via ntfy.

This module provides:
- Message construction for first-run, changed and errored websites
- Delivery through the ntfy JSON publishing endpoint

Delivery failures are raised, never swallowed: a lost notification means a
missed change.
"""

from typing import Optional

import httpx
import structlog

from monitor.exceptions import NotificationError
from monitor.models import ChangeResult, NotificationMessage, Priority, Target, utcnow

logger = structlog.get_logger(__name__)

DETECTION_TAG = "changedetection"


class NtfyNotifier:
    """Sends notification messages to an ntfy server."""

    def __init__(
        self,
        server: str,
        topic: str,
        snapshots_dir: str = "snapshots",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize notifier.

        Args:
            server: ntfy server URL (JSON messages are posted to its root)
            topic: Topic to publish to
            snapshots_dir: Snapshot directory referenced in change messages
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.server = server
        self.topic = topic
        self.snapshots_dir = snapshots_dir
        self.client_config = {"timeout": timeout}
        if transport is not None:
            self.client_config["transport"] = transport
        self.logger = logger.bind(component="ntfy_notifier")

    def build_change_message(
        self, result: ChangeResult, target: Target, snapshot_key: str
    ) -> NotificationMessage:
        """Message for a first-run or changed result."""
        timestamp = utcnow().isoformat()

        if result.is_first_run:
            title = f"✅ Initial snapshot: {result.name}"
            message = (
                f"Initial snapshot created for {result.url}\n"
                f"Content hash: {result.new_hash}\n"
                f"Timestamp: {timestamp}"
            )
        else:
            title = f"📢 Change detected: {result.name}"
            message = (
                f"Changes detected at {timestamp}\n"
                f"Snapshot: {self.snapshots_dir}/{snapshot_key}.json"
            )
            if result.diff:
                message += f"\n\n{result.diff}"

        return NotificationMessage(
            topic=self.topic,
            title=title,
            message=message,
            priority=target.priority.level,
            tags=[
                *target.tags,
                DETECTION_TAG,
                "initial" if result.is_first_run else "changed",
            ],
            click=result.url,
        )

    def build_error_message(self, target: Target, error: str) -> NotificationMessage:
        """Message for a website that could not be fetched."""
        return NotificationMessage(
            topic=self.topic,
            title=f"❌ Failed to fetch: {target.name}",
            message=(
                f"Failed to fetch {target.url}\n\n"
                f"Error: {error}\n"
                f"Timestamp: {utcnow().isoformat()}"
            ),
            priority=Priority.URGENT.level,
            tags=[*target.tags, "error"],
            click=target.url,
        )

    async def send_change_notification(
        self, result: ChangeResult, target: Target, snapshot_key: str
    ) -> None:
        await self.send(self.build_change_message(result, target, snapshot_key))

    async def send_error_notification(self, target: Target, error: str) -> None:
        await self.send(self.build_error_message(target, error))

    async def send(self, message: NotificationMessage) -> None:
        """
        Publish a message.

        Raises:
            NotificationError: If the server is unreachable or rejects the message
        """
        payload = message.model_dump(exclude_none=True)

        async with httpx.AsyncClient(**self.client_config) as client:
            try:
                response = await client.post(self.server, json=payload)
            except httpx.HTTPError as e:
                self.logger.error("Failed to send notification", title=message.title, error=str(e))
                raise NotificationError(f"Failed to reach ntfy server {self.server}: {e}") from e

        if not response.is_success:
            self.logger.error(
                "Notification rejected",
                title=message.title,
                status_code=response.status_code
            )
            raise NotificationError(
                f"ntfy returned {response.status_code}: {response.reason_phrase}"
            )

        self.logger.info("Notification sent", title=message.title, topic=message.topic)
