"""Retry loop for handling Jira API rate limits and transient network errors.

The retry budget comes from the run configuration and applies per logical
call: one initial attempt plus at most ``max_retries`` retries.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from jira_sprint_sync.jira.exceptions import RateLimitedError, TransportError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_EXCEPTIONS = (RateLimitedError, TransportError)


def calculate_backoff_delay(retry_number: int, initial_delay: float, exponential_base: float = 2.0) -> float:
    """Return the wait before the given retry (0-based); doubles every retry by default."""
    return initial_delay * (exponential_base**retry_number)


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    max_retries: int,
    initial_delay: float = 1.0,
    exponential_base: float = 2.0,
    operation: str | None = None,
) -> T:
    """Await ``func`` until it succeeds or the retry budget is spent.

    Only ``RateLimitedError`` and ``TransportError`` are retried. Each retry
    consumes one unit of budget whichever of the two triggered it. Any other
    exception propagates immediately.

    Args:
        func: Zero-argument coroutine factory performing one attempt.
        max_retries: Number of retries allowed after the first attempt.
        initial_delay: Wait in seconds before the first retry.
        exponential_base: Multiplier applied to the wait after every retry.
        operation: Label used in log events.

    Returns:
        Whatever ``func`` returns on its first successful attempt.

    Raises:
        RateLimitedError: If the last allowed attempt was rate limited.
        TransportError: If the last allowed attempt failed at the network level.
    """
    operation = operation or getattr(func, "__name__", "request")
    retry_number = 0
    while True:
        try:
            return await func()
        except RETRYABLE_EXCEPTIONS as e:
            if retry_number >= max_retries:
                logger.error(
                    "Retry budget exhausted",
                    operation=operation,
                    retries=retry_number,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise

            wait_time = calculate_backoff_delay(retry_number, initial_delay, exponential_base)
            logger.warning(
                f"{'Rate limit hit' if isinstance(e, RateLimitedError) else 'Transport error'}, retrying in {wait_time} seconds",
                operation=operation,
                attempt=retry_number + 1,
                max_retries=max_retries,
                wait_time=wait_time,
                error_type=type(e).__name__,
            )
            await asyncio.sleep(wait_time)
            retry_number += 1

