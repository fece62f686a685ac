"""
Unit tests for run summary reporting.
"""

import json
from datetime import datetime, timezone

import pytest

from monitor.models import ChangeResult, RunSummary
from monitor.report import SummaryReporter


@pytest.fixture
def run_summary():
    summary = RunSummary(started_at=datetime(2024, 1, 15, 12, 30, 5, tzinfo=timezone.utc))
    summary.add(ChangeResult(url="https://a.example.com/", name="A", changed=True))
    summary.add(ChangeResult(url="https://b.example.com/", name="B", is_first_run=True))
    summary.add(ChangeResult(url="https://c.example.com/", name="C", error="HTTP 404: Not Found"))
    summary.add(ChangeResult(url="https://d.example.com/", name="D"))
    summary.duration_seconds = 4.2
    return summary


class TestSummaryReporter:
    """Test cases for SummaryReporter class."""

    def test_format_summary(self, run_summary):
        text = SummaryReporter().format_summary(run_summary)

        assert text.startswith("Website Change Detection - 2024-01-15 12:30:05 UTC")
        assert "- Websites checked: 4" in text
        assert "- Changed: 1" in text
        assert "- First run: 1" in text
        assert "- Unchanged: 1" in text
        assert "- Errors: 1" in text
        assert "- Duration: 4.20s" in text
        assert "- A (https://a.example.com/)" in text
        assert "- C (https://c.example.com/): HTTP 404: Not Found" in text

    def test_log_summary_returns_text(self, run_summary):
        reporter = SummaryReporter()

        assert reporter.log_summary(run_summary) == reporter.format_summary(run_summary)

    def test_export_json(self, run_summary, tmp_path):
        reporter = SummaryReporter()

        path = reporter.export_json(run_summary, tmp_path / "reports")

        assert path == tmp_path / "reports" / "run_20240115_123005.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["checked"] == 4
        assert data["errors"] == 1
        assert len(data["results"]) == 4

    def test_export_uses_configured_directory(self, run_summary, tmp_path):
        path = SummaryReporter(reports_dir=tmp_path).export_json(run_summary)

        assert path.parent == tmp_path

    def test_export_without_directory(self, run_summary):
        assert SummaryReporter().export_json(run_summary) is None
