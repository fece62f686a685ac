"""
Generic retry-with-backoff helper, independent of the fetch transport.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import structlog

from fetcher.models import RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, float, Exception], None]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Optional[RetryCallback] = None,
) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    Args:
        operation: Zero-argument coroutine function performing one attempt
        policy: Attempt budget and delays
        retry_on: Exception types that count as a failed attempt
        sleep: Coroutine used to wait between attempts
        on_retry: Called with (attempt, delay, error) before each wait

    Returns:
        The result of the first successful attempt

    Raises:
        The exception of the last attempt once the budget is exhausted
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == policy.max_attempts:
                logger.debug(
                    "Retry budget exhausted",
                    attempts=policy.max_attempts,
                    error=str(e)
                )
                raise

            delay = policy.delay_for(attempt)
            if on_retry is not None:
                on_retry(attempt, delay, e)
            await sleep(delay)

    # max_attempts >= 1, so the loop always returns or raises
    raise RuntimeError("retry loop exited without a result")
