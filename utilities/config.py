"""
Configuration management using environment variables.
Handles monitor settings and the list of monitored websites with validation and defaults.
"""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fetcher.models import RetryPolicy
from monitor.exceptions import ConfigurationError
from monitor.models import Target


class MonitorSettings(BaseSettings):
    """
    Settings for a single monitoring invocation.
    Uses pydantic BaseSettings for environment variable management.
    Instances are immutable once constructed.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
        frozen=True,
    )

    # Notification Configuration
    ntfy_topic: str = Field(default="", description="ntfy topic; empty disables notifications")
    ntfy_server: str = Field(default="https://ntfy.sh")

    # Fetch Configuration
    request_timeout: float = Field(default=30.0, description="Per-attempt timeout in seconds")
    retry_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=10.0)
    rate_limit_per_second: float = Field(default=2.0)
    large_content_threshold: int = Field(default=1048576, description="Warn above this many bytes")
    user_agent: str = Field(default="Mozilla/5.0 (compatible; WebsiteChangeDetection/1.0)")

    # Storage Configuration
    snapshots_dir: str = Field(default="snapshots")
    websites_file: str = Field(default="websites.json")
    reports_dir: Optional[str] = Field(default=None)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_file: Optional[str] = Field(default=None)
    debug: bool = Field(default=False)

    # Snapshot commits
    git_author_name: str = Field(default="ChangeBot")
    git_author_email: str = Field(default="github-actions[bot]@users.noreply.github.com")

    @field_validator('request_timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Ensure timeout is reasonable."""
        if v < 1 or v > 300:
            raise ValueError('request_timeout must be between 1 and 300 seconds')
        return v

    @field_validator('retry_attempts')
    @classmethod
    def validate_retry_attempts(cls, v):
        """Ensure retry attempts is reasonable."""
        if v < 1 or v > 10:
            raise ValueError('retry_attempts must be between 1 and 10')
        return v

    @field_validator('retry_base_delay', 'retry_max_delay')
    @classmethod
    def validate_retry_delay(cls, v):
        if v < 0:
            raise ValueError('retry delays cannot be negative')
        return v

    @field_validator('rate_limit_per_second')
    @classmethod
    def validate_rate_limit(cls, v):
        """Ensure rate limit is reasonable."""
        if v < 0.1 or v > 10:
            raise ValueError('rate_limit_per_second must be between 0.1 and 10')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_retry_policy(self) -> RetryPolicy:
        """Build the fetch retry policy from the retry settings."""
        return RetryPolicy(
            max_attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            cap_delay=self.retry_max_delay,
        )

    def get_snapshots_path(self) -> Path:
        return Path(self.snapshots_dir)

    def get_websites_path(self) -> Path:
        return Path(self.websites_file)

    def get_reports_path(self) -> Optional[Path]:
        if self.reports_dir:
            return Path(self.reports_dir)
        return None

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def notifications_enabled(self) -> bool:
        return bool(self.ntfy_topic)

    def get_headers(self) -> dict:
        """Get default headers for HTTP requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }


def get_settings(**overrides) -> MonitorSettings:
    """
    Build settings from the environment.

    Raises:
        ConfigurationError: If any setting fails validation
    """
    try:
        return MonitorSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def load_targets(path: Path) -> List[Target]:
    """
    Load monitored websites from a JSON file.

    The file holds either a list of website objects or an object with a
    ``websites`` list. Each website has ``name``, ``url`` and optionally
    ``selector``, ``enabled``, ``priority`` and ``tags``.

    Args:
        path: Path to the websites file

    Returns:
        Targets in file order

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Websites file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read websites file {path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("websites", [])
    if not isinstance(raw, list):
        raise ConfigurationError(f"Websites file {path} must contain a list of websites")

    targets = []
    for index, item in enumerate(raw):
        try:
            targets.append(Target.model_validate(item))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid website #{index + 1} in {path}: {e}") from e

    return targets
