"""
Unit tests for the monitoring context logger.
"""

from structlog.testing import capture_logs

from utilities.logger import MonitorLogger


class TestMonitorLogger:
    """Test cases for MonitorLogger class."""

    def test_bound_context_is_added(self):
        with capture_logs() as logs:
            monitor_logger = MonitorLogger("test").bind_context(run="nightly")
            monitor_logger.log_target_start("Home", "https://example.com/")

        assert logs[0]["event"] == "Checking website"
        assert logs[0]["run"] == "nightly"
        assert logs[0]["url"] == "https://example.com/"

    def test_clear_context(self):
        with capture_logs() as logs:
            monitor_logger = MonitorLogger("test").bind_context(run="nightly").clear_context()
            monitor_logger.log_run_start(total_targets=3, enabled_targets=2)

        assert "run" not in logs[0]
        assert logs[0]["total_targets"] == 3
        assert logs[0]["enabled_targets"] == 2

    def test_result_levels(self):
        with capture_logs() as logs:
            monitor_logger = MonitorLogger("test")
            monitor_logger.log_result("A", "https://a.example.com/", "changed", "f" * 64)
            monitor_logger.log_result("B", "https://b.example.com/", "unchanged", "e" * 64)

        assert [log["log_level"] for log in logs] == ["info", "debug"]
        assert logs[0]["hash"] == "f" * 16 + "..."

    def test_retry_and_error(self):
        with capture_logs() as logs:
            monitor_logger = MonitorLogger("test")
            monitor_logger.log_retry("https://example.com/", 1, 3, 1.0, "HTTP 503: Service Unavailable")
            monitor_logger.log_error("HTTP 503: Service Unavailable", url="https://example.com/", name="Home")

        assert logs[0]["log_level"] == "warning"
        assert logs[0]["delay_seconds"] == 1.0
        assert logs[1]["log_level"] == "error"
        assert logs[1]["name"] == "Home"
