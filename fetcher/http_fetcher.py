"""
Async page fetcher for monitored websites.
Implements fetching with retry logic, rate limiting and error handling.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
import structlog
from asyncio_throttle import Throttler

from fetcher.models import FetchOptions, FetchResult
from fetcher.retry import retry_with_backoff
from monitor.exceptions import FetchError
from utilities.logger import MonitorLogger

logger = structlog.get_logger(__name__)


class PageFetcher:
    """
    Fetches raw page text over HTTP.

    Each fetch is a bounded sequence of attempts; the caller only sees the
    final FetchResult, never an exception.
    """

    def __init__(
        self,
        options: FetchOptions,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            options: Timeout, retry policy and rate limit
            headers: Default request headers
            transport: Optional httpx transport (used by tests)
            sleep: Coroutine used to wait between attempts
        """
        self.options = options
        self.sleep = sleep
        # One request per interval keeps fractional rates exact
        self.throttler = Throttler(rate_limit=1, period=1.0 / options.rate_limit_per_second)
        self.monitor_logger = MonitorLogger("page_fetcher")
        self.logger = logger.bind(component="page_fetcher")

        # HTTP client configuration
        self.client_config = {
            "timeout": options.timeout,
            "headers": headers or {},
            "follow_redirects": True,
        }
        if transport is not None:
            self.client_config["transport"] = transport

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a page.

        Args:
            url: Address to fetch

        Returns:
            FetchResult with content and status, or with ``error`` set once
            the retry budget is exhausted
        """
        policy = self.options.retry_policy

        def log_retry(attempt: int, delay: float, error: Exception) -> None:
            self.monitor_logger.log_retry(url, attempt, policy.max_attempts, delay, str(error))

        try:
            async with httpx.AsyncClient(**self.client_config) as client:
                response = await retry_with_backoff(
                    lambda: self._attempt(client, url),
                    policy,
                    retry_on=(FetchError,),
                    sleep=self.sleep,
                    on_retry=log_retry,
                )
        except FetchError as e:
            self.logger.error(
                "Fetch failed",
                url=url,
                attempts=policy.max_attempts,
                error=str(e)
            )
            return FetchResult(content="", status_code=e.status_code, error=str(e))

        content = response.text
        self._check_size(url, content)

        return FetchResult(content=content, status_code=response.status_code)

    async def _attempt(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        """Perform one request, turning every failure into FetchError."""
        async with self.throttler:
            try:
                response = await client.get(url)
            except httpx.TimeoutException as e:
                raise FetchError(f"Request timed out after {self.options.timeout}s") from e
            except httpx.HTTPError as e:
                raise FetchError(f"Request failed: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        return response

    def _check_size(self, url: str, content: str) -> None:
        size = len(content.encode("utf-8"))
        if size > self.options.large_content_threshold:
            self.logger.warning(
                "Large content fetched",
                url=url,
                size_bytes=size,
                threshold_bytes=self.options.large_content_threshold
            )
