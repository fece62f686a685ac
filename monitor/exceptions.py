"""
Exception types for website change detection.

Selector misses and markup parse failures are not represented here: the
extractor logs them and falls back to the full page.
"""

from typing import Dict, Optional


class MonitorError(Exception):
    """Base exception for monitoring errors."""

    pass


class ConfigurationError(MonitorError):
    """Raised when settings or the websites file are invalid."""

    pass


class FetchError(MonitorError):
    """Raised by a single fetch attempt (HTTP error status, timeout, transport failure)."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class SnapshotStoreError(MonitorError):
    """Raised when a snapshot record cannot be loaded or saved."""

    pass


class NotificationError(MonitorError):
    """Raised when a push notification could not be delivered."""

    pass


class VCSError(MonitorError):
    """Raised when committing or pushing snapshots fails."""

    pass


class MonitorRunError(MonitorError):
    """
    Raised at the end of a run when one or more websites hit a store or
    notification failure. Every website is still processed first.
    """

    def __init__(self, failures: Dict[str, Exception], summary: Optional[object] = None):
        self.failures = failures
        self.summary = summary
        details = "; ".join(f"{url}: {error}" for url, error in failures.items())
        super().__init__(f"{len(failures)} website(s) failed: {details}")
