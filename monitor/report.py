"""
Run summary reporting.

This module provides:
- A human-readable summary of one monitoring run, logged at the end
- JSON export of the run summary to a reports directory
"""

import json
from pathlib import Path
from typing import Optional

import structlog

from monitor.models import DetectionState, RunSummary

logger = structlog.get_logger(__name__)


class SummaryReporter:
    """Formats, logs and exports run summaries."""

    def __init__(self, reports_dir: Optional[Path] = None):
        """
        Initialize reporter.

        Args:
            reports_dir: Directory for JSON exports, None disables export
        """
        self.reports_dir = Path(reports_dir) if reports_dir else None
        self.logger = logger.bind(component="summary_reporter")

    def format_summary(self, summary: RunSummary) -> str:
        text = f"""
Website Change Detection - {summary.started_at.strftime('%Y-%m-%d %H:%M:%S')} UTC

Summary:
- Websites checked: {summary.checked}
- Changed: {summary.changed}
- First run: {summary.first_run}
- Unchanged: {summary.unchanged}
- Errors: {summary.errors}
- Duration: {summary.duration_seconds:.2f}s
"""
        changed = [r for r in summary.results if r.state == DetectionState.CHANGED]
        if changed:
            text += "\nChanged websites:\n"
            for result in changed:
                text += f"- {result.name} ({result.url})\n"

        failed = [r for r in summary.results if r.state == DetectionState.ERRORED]
        if failed:
            text += "\nFailed websites:\n"
            for result in failed:
                text += f"- {result.name} ({result.url}): {result.error}\n"

        return text.strip()

    def log_summary(self, summary: RunSummary) -> str:
        """Log the summary of a run and return its text."""
        text = self.format_summary(summary)
        self.logger.info(
            "Run summary",
            message=text,
            checked=summary.checked,
            changed=summary.changed,
            first_run=summary.first_run,
            unchanged=summary.unchanged,
            errors=summary.errors
        )
        return text

    def export_json(self, summary: RunSummary, directory: Optional[Path] = None) -> Optional[Path]:
        """
        Write the summary to ``run_<timestamp>.json``.

        Args:
            summary: Run summary
            directory: Target directory, defaults to the configured reports directory

        Returns:
            Path of the written file, or None when no directory is configured
        """
        directory = Path(directory) if directory else self.reports_dir
        if directory is None:
            return None

        directory.mkdir(parents=True, exist_ok=True)
        filepath = directory / f"run_{summary.started_at.strftime('%Y%m%d_%H%M%S')}.json"

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(summary.model_dump(mode="json"), f, indent=2, ensure_ascii=False)

        self.logger.info("Exported run report", filepath=str(filepath))

        return filepath
