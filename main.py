#!/usr/bin/env python3
"""
Main entry point for website change detection.

One invocation checks every configured website once, stores the snapshots,
sends notifications and, with ``--update``, commits and pushes the snapshot
directory. Scheduling is left to cron or CI.

Usage: python main.py [--update] [--websites PATH] [--report]
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fetcher.http_fetcher import PageFetcher
from fetcher.models import FetchOptions
from monitor.change_detector import ChangeDetector
from monitor.exceptions import ConfigurationError, MonitorRunError, VCSError
from monitor.notifier import NtfyNotifier
from monitor.report import SummaryReporter
from monitor.snapshot_store import SnapshotStore
from monitor.vcs import GitCommitter
from utilities.config import MonitorSettings, get_settings, load_targets
from utilities.logger import get_logger, setup_logging

USAGE = "Usage: python main.py [--update] [--websites PATH] [--report]"


def parse_args(argv: List[str]) -> dict:
    """
    Parse command line arguments.

    Raises:
        ConfigurationError: On an unknown argument or a missing value
    """
    options = {"update": False, "websites": None, "report": False}

    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg == "--update":
            options["update"] = True
        elif arg == "--report":
            options["report"] = True
        elif arg == "--websites":
            if not args:
                raise ConfigurationError("--websites requires a path")
            options["websites"] = Path(args.pop(0))
        elif arg.startswith("--websites="):
            options["websites"] = Path(arg.split("=", 1)[1])
        else:
            raise ConfigurationError(f"Unknown argument: {arg}")

    return options


def build_detector(settings: MonitorSettings) -> ChangeDetector:
    """Wire the fetcher, store and notifier from settings."""
    fetcher = PageFetcher(
        FetchOptions(
            timeout=settings.request_timeout,
            retry_policy=settings.get_retry_policy(),
            rate_limit_per_second=settings.rate_limit_per_second,
            large_content_threshold=settings.large_content_threshold
        ),
        headers=settings.get_headers()
    )

    notifier = None
    if settings.notifications_enabled():
        notifier = NtfyNotifier(
            server=settings.ntfy_server,
            topic=settings.ntfy_topic,
            snapshots_dir=settings.snapshots_dir,
            timeout=settings.request_timeout
        )

    return ChangeDetector(
        fetcher=fetcher,
        store=SnapshotStore(settings.get_snapshots_path()),
        notifier=notifier
    )


async def run_monitor(
    settings: MonitorSettings,
    websites_path: Optional[Path] = None,
    update: bool = False,
    report: bool = False,
    detector: Optional[ChangeDetector] = None,
    committer: Optional[GitCommitter] = None,
) -> int:
    """
    Run one monitoring pass.

    Returns:
        Process exit status: 0 on success, 1 on any configuration, run or
        commit failure
    """
    logger = get_logger(__name__)

    try:
        targets = load_targets(websites_path or settings.get_websites_path())
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 1

    if not settings.notifications_enabled():
        logger.warning("NTFY_TOPIC not set, notifications disabled")

    if detector is None:
        detector = build_detector(settings)
    reporter = SummaryReporter(settings.get_reports_path())

    try:
        summary = await detector.run(targets)
    except MonitorRunError as e:
        logger.error("Monitoring run failed", error=str(e), failed=len(e.failures))
        if e.summary is not None:
            reporter.log_summary(e.summary)
        return 1

    reporter.log_summary(summary)
    if report:
        reporter.export_json(summary, settings.get_reports_path() or Path("reports"))

    if update:
        if committer is None:
            committer = GitCommitter(
                repo_dir=Path.cwd(),
                author_name=settings.git_author_name,
                author_email=settings.git_author_email,
                paths=[settings.snapshots_dir]
            )
        try:
            committer.commit_and_push()
        except VCSError as e:
            logger.error("Failed to commit snapshots", error=str(e))
            return 1

    return 0


async def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run website change detection."""
    try:
        options = parse_args(sys.argv[1:] if argv is None else argv)
        settings = get_settings()
    except ConfigurationError as e:
        print(f"❌ {e}")
        print(USAGE)
        return 1

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.get_log_file_path(),
        debug=settings.debug
    )

    logger = get_logger(__name__)
    logger.info("Starting website change detection", update=options["update"])

    return await run_monitor(
        settings,
        websites_path=options["websites"],
        update=options["update"],
        report=options["report"]
    )


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
