"""
Pydantic models for fetching pages: retry policy, fetch options and results.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """
    Bounded retry with exponential backoff.

    The delay before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)``
    seconds, capped at ``cap_delay``.
    """
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts, including the first")
    base_delay: float = Field(default=1.0, ge=0)
    cap_delay: float = Field(default=10.0, ge=0)

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.cap_delay)


class FetchOptions(BaseModel):
    """Per-invocation fetch settings."""
    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=30.0, gt=0, description="Per-attempt timeout in seconds")
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    rate_limit_per_second: float = Field(default=2.0, gt=0)
    large_content_threshold: int = Field(default=1048576, ge=0)


class FetchResult(BaseModel):
    """Outcome of fetching one page after the retry budget."""
    content: str = Field(default="")
    status_code: int = Field(default=0)
    error: Optional[str] = Field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.error is None
