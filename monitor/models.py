"""
Models for website change detection.

This module defines Pydantic models for:
- Monitored websites (targets) and their selectors
- Snapshot records persisted between runs
- Per-website detection results and run summaries
- Notification payloads
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from monitor.exceptions import ConfigurationError


XPATH_PREFIX = "xpath="


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def url_to_key(url: str) -> str:
    """
    Generate a filesystem-safe snapshot key from a URL.

    ``https://www.Example.com/products/item-1`` becomes
    ``www-example-comproducts-item-1``; an empty path becomes ``index``.

    Raises:
        ConfigurationError: If the URL has no hostname
    """
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid URL: {url}")

    hostname = parsed.hostname.replace(".", "-")
    path = re.sub(r"[^a-zA-Z0-9]", "-", parsed.path)
    path = re.sub(r"-+", "-", path).strip("-")

    return f"{hostname}{path or 'index'}".lower()


class Priority(str, Enum):
    """Notification priority of a website."""
    URGENT = "urgent"
    HIGH = "high"
    DEFAULT = "default"
    LOW = "low"
    MIN = "min"

    @property
    def level(self) -> int:
        """Numeric ntfy priority (5 = urgent ... 1 = min)."""
        return {
            Priority.URGENT: 5,
            Priority.HIGH: 4,
            Priority.DEFAULT: 3,
            Priority.LOW: 2,
            Priority.MIN: 1,
        }[self]


class SelectorKind(str, Enum):
    """How the region of interest is located in a fetched page."""
    FULL = "full"
    CSS = "css"
    XPATH = "xpath"


class Selector(BaseModel):
    """Resolved selector: the full page, a CSS query or an XPath query."""
    model_config = ConfigDict(frozen=True)

    kind: SelectorKind = Field(default=SelectorKind.FULL)
    expression: Optional[str] = Field(default=None)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Selector":
        """
        Resolve a configured selector string.

        ``None`` or an empty string selects the full page, ``xpath=<expr>``
        selects an XPath query and anything else is a CSS query.
        """
        if not raw:
            return cls(kind=SelectorKind.FULL)
        if raw.startswith(XPATH_PREFIX):
            expression = raw[len(XPATH_PREFIX):]
            if not expression.strip():
                raise ValueError("xpath selector requires an expression")
            return cls(kind=SelectorKind.XPATH, expression=expression)
        return cls(kind=SelectorKind.CSS, expression=raw)

    @property
    def raw(self) -> Optional[str]:
        """The selector in its configured string form."""
        if self.kind == SelectorKind.FULL:
            return None
        if self.kind == SelectorKind.XPATH:
            return f"{XPATH_PREFIX}{self.expression}"
        return self.expression


class Target(BaseModel):
    """A monitored website and its extraction and notification settings."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display name")
    url: str = Field(..., description="Fetch address, also the snapshot identity")
    selector: Selector = Field(default_factory=Selector)
    enabled: bool = Field(default=True)
    priority: Priority = Field(default=Priority.DEFAULT)
    tags: List[str] = Field(default_factory=list)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        """Ensure the address is an absolute http(s) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"Invalid URL: {v}")
        return v

    @field_validator('selector', mode='before')
    @classmethod
    def resolve_selector(cls, v):
        if v is None or isinstance(v, str):
            return Selector.parse(v)
        return v

    @property
    def snapshot_key(self) -> str:
        return url_to_key(self.url)


class SnapshotEntry(BaseModel):
    """Content captured by one successful fetch."""
    timestamp: datetime = Field(default_factory=utcnow)
    content: str = Field(..., description="Extracted content")
    hash: str = Field(..., description="SHA-256 hex digest of the content")
    status: int = Field(..., description="HTTP status code of the fetch")


class Snapshot(BaseModel):
    """Persisted state of a website between runs."""
    url: str
    name: str
    current: SnapshotEntry
    previous: Optional[SnapshotEntry] = Field(default=None)
    last_check: datetime = Field(default_factory=utcnow)
    change_count: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)
    enabled: bool = Field(default=True)
    selector: Optional[str] = Field(default=None)


class NotFound(BaseModel):
    """No snapshot has been stored for the key yet."""
    key: str


class Found(BaseModel):
    """A stored snapshot."""
    snapshot: Snapshot


LoadResult = Union[NotFound, Found]


class DetectionState(str, Enum):
    """Outcome of checking one website."""
    FIRST_RUN = "first_run"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    ERRORED = "errored"


class ChangeResult(BaseModel):
    """Result of checking one website in one run. Never persisted."""
    url: str
    name: str
    changed: bool = Field(default=False)
    is_first_run: bool = Field(default=False)
    old_hash: Optional[str] = Field(default=None)
    new_hash: Optional[str] = Field(default=None)
    diff: Optional[str] = Field(default=None)
    error: Optional[str] = Field(default=None)

    @property
    def state(self) -> DetectionState:
        if self.error is not None:
            return DetectionState.ERRORED
        if self.is_first_run:
            return DetectionState.FIRST_RUN
        if self.changed:
            return DetectionState.CHANGED
        return DetectionState.UNCHANGED


class NotificationMessage(BaseModel):
    """Payload accepted by the ntfy JSON publishing endpoint."""
    topic: str
    title: str
    message: str
    priority: int = Field(default=3, ge=1, le=5)
    tags: List[str] = Field(default_factory=list)
    click: Optional[str] = Field(default=None)


class RunSummary(BaseModel):
    """Aggregate of one monitoring invocation."""
    started_at: datetime = Field(default_factory=utcnow)
    checked: int = Field(default=0)
    changed: int = Field(default=0)
    first_run: int = Field(default=0)
    unchanged: int = Field(default=0)
    errors: int = Field(default=0)
    duration_seconds: float = Field(default=0.0)
    results: List[ChangeResult] = Field(default_factory=list)
    updated_keys: List[str] = Field(default_factory=list)

    def add(self, result: ChangeResult) -> None:
        """Count a result into the summary."""
        self.results.append(result)
        self.checked += 1
        state = result.state
        if state == DetectionState.CHANGED:
            self.changed += 1
        elif state == DetectionState.FIRST_RUN:
            self.first_run += 1
        elif state == DetectionState.ERRORED:
            self.errors += 1
        else:
            self.unchanged += 1
