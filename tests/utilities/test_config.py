"""
Unit tests for settings and the websites file loader.
"""

import json

import pytest
from pydantic import ValidationError

from monitor.exceptions import ConfigurationError
from monitor.models import Priority, SelectorKind
from utilities.config import MonitorSettings, get_settings, load_targets


@pytest.fixture
def clean_env(monkeypatch):
    """Remove settings variables that would override defaults."""
    for name in (
        "NTFY_TOPIC", "NTFY_SERVER", "REQUEST_TIMEOUT", "RETRY_ATTEMPTS",
        "RETRY_BASE_DELAY", "RETRY_MAX_DELAY", "RATE_LIMIT_PER_SECOND",
        "SNAPSHOTS_DIR", "WEBSITES_FILE", "REPORTS_DIR", "LOG_LEVEL",
        "LOG_FORMAT", "LOG_FILE", "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


class TestMonitorSettings:
    """Test cases for MonitorSettings."""

    def test_defaults(self, clean_env):
        settings = get_settings(_env_file=None)

        assert settings.ntfy_server == "https://ntfy.sh"
        assert settings.request_timeout == 30.0
        assert settings.retry_attempts == 3
        assert settings.snapshots_dir == "snapshots"
        assert settings.log_level == "INFO"
        assert settings.notifications_enabled() is False
        assert settings.get_reports_path() is None
        assert settings.get_log_file_path() is None

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("NTFY_TOPIC", "my-alerts")
        monkeypatch.setenv("RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_settings(_env_file=None)

        assert settings.ntfy_topic == "my-alerts"
        assert settings.notifications_enabled() is True
        assert settings.retry_attempts == 5
        assert settings.log_level == "DEBUG"

    def test_reads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("NTFY_TOPIC=from-file\nSNAPSHOTS_DIR=data/snapshots\n", encoding="utf-8")

        settings = get_settings(_env_file=env_file)

        assert settings.ntfy_topic == "from-file"
        assert str(settings.get_snapshots_path()) == "data/snapshots"

    @pytest.mark.parametrize("field,value", [
        ("request_timeout", 0),
        ("request_timeout", 301),
        ("retry_attempts", 0),
        ("retry_attempts", 11),
        ("retry_base_delay", -1),
        ("rate_limit_per_second", 0.01),
        ("log_level", "VERBOSE"),
        ("log_format", "xml"),
    ])
    def test_invalid_values(self, clean_env, field, value):
        with pytest.raises(ConfigurationError):
            get_settings(_env_file=None, **{field: value})

    def test_settings_are_immutable(self, clean_env):
        settings = MonitorSettings(_env_file=None)

        with pytest.raises(ValidationError):
            settings.ntfy_topic = "changed"

    def test_retry_policy(self, clean_env):
        settings = get_settings(_env_file=None, retry_attempts=4, retry_base_delay=0.5, retry_max_delay=2.0)

        policy = settings.get_retry_policy()

        assert policy.max_attempts == 4
        assert policy.base_delay == 0.5
        assert policy.cap_delay == 2.0

    def test_headers(self, clean_env):
        headers = get_settings(_env_file=None, user_agent="TestAgent/2.0").get_headers()

        assert headers["User-Agent"] == "TestAgent/2.0"
        assert "text/html" in headers["Accept"]


class TestLoadTargets:
    """Test cases for load_targets."""

    def write(self, tmp_path, data):
        path = tmp_path / "websites.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_load_list(self, tmp_path):
        path = self.write(tmp_path, [
            {"name": "Home", "url": "https://example.com/"},
            {
                "name": "News",
                "url": "https://example.com/news",
                "selector": "xpath=//main",
                "enabled": False,
                "priority": "high",
                "tags": ["news"]
            },
        ])

        targets = load_targets(path)

        assert [t.name for t in targets] == ["Home", "News"]
        assert targets[0].selector.kind == SelectorKind.FULL
        assert targets[1].selector.kind == SelectorKind.XPATH
        assert targets[1].enabled is False
        assert targets[1].priority == Priority.HIGH

    def test_load_object_with_websites_key(self, tmp_path):
        path = self.write(tmp_path, {"websites": [{"name": "Home", "url": "https://example.com/", "selector": "h1"}]})

        targets = load_targets(path)

        assert len(targets) == 1
        assert targets[0].selector.kind == SelectorKind.CSS

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Websites file not found"):
            load_targets(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "websites.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_targets(path)

    def test_not_a_list(self, tmp_path):
        path = self.write(tmp_path, "https://example.com")

        with pytest.raises(ConfigurationError, match="must contain a list"):
            load_targets(path)

    def test_invalid_website(self, tmp_path):
        path = self.write(tmp_path, [
            {"name": "Home", "url": "https://example.com/"},
            {"name": "Broken", "url": "not-a-url"},
        ])

        with pytest.raises(ConfigurationError, match="Invalid website #2"):
            load_targets(path)
