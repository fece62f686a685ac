"""
Change detection engine for monitored websites.

This module provides:
- The per-website state machine (first run, unchanged, changed, errored)
- Snapshot rotation and change/error counting
- The batch run over all configured websites with failure isolation
"""

import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from fetcher.extractor import ContentExtractor
from fetcher.http_fetcher import PageFetcher
from monitor.differ import ContentDiffer
from monitor.exceptions import MonitorRunError, NotificationError, SnapshotStoreError
from monitor.hashing import ContentHasher
from monitor.models import (
    ChangeResult, DetectionState, Found, RunSummary, Snapshot, SnapshotEntry, Target, utcnow
)
from monitor.notifier import NtfyNotifier
from monitor.snapshot_store import SnapshotStore
from utilities.logger import MonitorLogger

logger = structlog.get_logger(__name__)


class ChangeDetector:
    """Engine for detecting changes in monitored websites."""

    def __init__(
        self,
        fetcher: PageFetcher,
        store: SnapshotStore,
        extractor: Optional[ContentExtractor] = None,
        hasher: Optional[ContentHasher] = None,
        differ: Optional[ContentDiffer] = None,
        notifier: Optional[NtfyNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize change detector.

        Args:
            fetcher: Page fetcher (anything with an async ``fetch(url)``)
            store: Snapshot store
            extractor: Content extractor, defaults to ContentExtractor()
            hasher: Content hasher, defaults to ContentHasher()
            differ: Differ, defaults to ContentDiffer()
            notifier: Notification sink, None disables notifications
            clock: Returns the current time for snapshot timestamps
        """
        self.fetcher = fetcher
        self.store = store
        self.extractor = extractor or ContentExtractor()
        self.hasher = hasher or ContentHasher()
        self.differ = differ or ContentDiffer()
        self.notifier = notifier
        self.clock = clock
        self.monitor_logger = MonitorLogger("change_detector")
        self.logger = logger.bind(component="change_detector")

    async def run(self, targets: List[Target]) -> RunSummary:
        """
        Check every enabled website once, in configuration order.

        A failed fetch is recorded in the summary and never stops the run.
        Failed websites, store failures included, get an error notification.
        Store and notification failures are collected and raised together
        once every website has been processed.

        Args:
            targets: Configured websites

        Returns:
            RunSummary of the invocation

        Raises:
            MonitorRunError: If any website hit a store or notification failure
        """
        enabled = [target for target in targets if target.enabled]
        summary = RunSummary(started_at=self.clock())
        failures: Dict[str, Exception] = {}

        self.monitor_logger.bind_context(run_id=str(uuid.uuid4()))
        try:
            self.monitor_logger.log_run_start(len(targets), len(enabled))

            for target in enabled:
                self.monitor_logger.log_target_start(target.name, target.url)

                try:
                    result, key = await self.check_target(target)
                except SnapshotStoreError as e:
                    self.monitor_logger.log_error(str(e), url=target.url, name=target.name)
                    failures[target.url] = e
                    result, key = ChangeResult(url=target.url, name=target.name, error=str(e)), None

                summary.add(result)
                if key is not None:
                    summary.updated_keys.append(key)

                try:
                    await self.notify(result, target)
                except NotificationError as e:
                    self.monitor_logger.log_error(str(e), url=target.url, name=target.name)
                    failures.setdefault(target.url, e)

            summary.duration_seconds = (self.clock() - summary.started_at).total_seconds()

            self.monitor_logger.log_run_complete(
                checked=summary.checked,
                changed=summary.changed,
                first_run=summary.first_run,
                errors=summary.errors,
                duration_seconds=summary.duration_seconds
            )
        finally:
            self.monitor_logger.clear_context()

        if failures:
            raise MonitorRunError(failures, summary)

        return summary

    async def check_target(self, target: Target) -> Tuple[ChangeResult, Optional[str]]:
        """
        Fetch a website, compare it with its snapshot and persist the outcome.

        Args:
            target: Website to check

        Returns:
            The result and the snapshot key if the store was written, else None

        Raises:
            SnapshotStoreError: If the snapshot cannot be loaded or saved
        """
        fetch_result = await self.fetcher.fetch(target.url)

        if not fetch_result.succeeded:
            return self._record_error(target, fetch_result.error)

        content = self.extractor.extract(fetch_result.content, target.selector)
        content_hash = self.hasher.hash(content)
        now = self.clock()
        entry = SnapshotEntry(
            timestamp=now,
            content=content,
            hash=content_hash,
            status=fetch_result.status_code
        )

        loaded = self.store.load(target.url)

        if not isinstance(loaded, Found):
            result = ChangeResult(
                url=target.url,
                name=target.name,
                is_first_run=True,
                new_hash=content_hash
            )
            snapshot = Snapshot(
                url=target.url,
                name=target.name,
                current=entry,
                last_check=now,
                enabled=target.enabled,
                selector=target.selector.raw
            )
            return result, self._save(snapshot, result)

        prior = loaded.snapshot

        if prior.current.hash == content_hash:
            result = ChangeResult(
                url=target.url,
                name=target.name,
                old_hash=prior.current.hash,
                new_hash=content_hash
            )
            self.monitor_logger.log_result(target.name, target.url, result.state.value, content_hash)
            return result, None

        result = ChangeResult(
            url=target.url,
            name=target.name,
            changed=True,
            old_hash=prior.current.hash,
            new_hash=content_hash,
            diff=self.differ.diff(prior.current.content, content)
        )
        snapshot = Snapshot(
            url=target.url,
            name=target.name,
            current=entry,
            previous=prior.current,
            last_check=now,
            change_count=prior.change_count + 1,
            error_count=prior.error_count,
            enabled=target.enabled,
            selector=target.selector.raw
        )
        return result, self._save(snapshot, result)

    async def notify(self, result: ChangeResult, target: Target) -> None:
        """
        Send the notification a result calls for, if any.

        Raises:
            NotificationError: If delivery fails
        """
        if self.notifier is None:
            return

        state = result.state
        if state == DetectionState.ERRORED:
            await self.notifier.send_error_notification(target, result.error)
        elif state in (DetectionState.FIRST_RUN, DetectionState.CHANGED):
            await self.notifier.send_change_notification(result, target, target.snapshot_key)

    def _record_error(self, target: Target, error: Optional[str]) -> Tuple[ChangeResult, Optional[str]]:
        """Count a failed fetch against an existing snapshot; content is left as it was."""
        result = ChangeResult(url=target.url, name=target.name, error=error)
        self.monitor_logger.log_error(error, url=target.url, name=target.name)

        loaded = self.store.load(target.url)
        if not isinstance(loaded, Found):
            return result, None

        snapshot = loaded.snapshot.model_copy(
            update={"error_count": loaded.snapshot.error_count + 1}
        )
        key = self.store.save(snapshot)
        self.monitor_logger.log_snapshot_saved(key, snapshot.change_count, snapshot.error_count)

        return result, key

    def _save(self, snapshot: Snapshot, result: ChangeResult) -> str:
        key = self.store.save(snapshot)
        self.monitor_logger.log_result(result.name, result.url, result.state.value, result.new_hash)
        self.monitor_logger.log_snapshot_saved(key, snapshot.change_count, snapshot.error_count)
        return key
