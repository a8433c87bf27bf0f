"""Retry helper for transient network errors.

Used where a scenario depends on a request that can fail for reasons
unrelated to the behavior under test (slow dev server start, dropped
connections).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    TimeoutError,
    httpx.TimeoutException,
    httpx.NetworkError,
)

DEFAULT_MAX_ATTEMPTS: int = 3
DEFAULT_BACKOFF_BASE: float = 1.0


def is_retryable(exception: Exception) -> bool:
    """Check if an exception is retryable.

    Args:
        exception: The exception to check.

    Returns:
        True if the exception is retryable, False otherwise.
    """
    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        logger.debug("Retryable exception type: %s", type(exception).__name__)
        return True

    # Playwright reports navigation failures and timeouts as plain Error
    if isinstance(exception, PlaywrightError):
        msg = str(exception).lower()
        if "timeout" in msg or "timed out" in msg or "net::err_connection_refused" in msg:
            logger.debug("Retryable Playwright error: %s", msg)
            return True

    return False


async def with_retry(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
) -> T:
    """Execute an async function with retry on transient errors.

    Implements exponential backoff: backoff_base * 2^(attempt-1).

    Args:
        func: Async function to execute (typically a lambda wrapping the call).
        max_attempts: Maximum number of attempts (default: 3).
        backoff_base: Base delay in seconds for exponential backoff (default: 1.0).

    Returns:
        The result of the function call.

    Raises:
        The last exception if all attempts fail, or the first
        non-retryable exception.

    Example:
        >>> response = await with_retry(lambda: api_request("GET", "/health"))
    """
    last_exception: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e):
                raise

            last_exception = e

            if attempt < max_attempts:
                delay = backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    "Attempt %d/%d failed: %s: %s. Retrying in %.1fs...",
                    attempt,
                    max_attempts,
                    type(e).__name__,
                    str(e),
                    delay,
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    "Attempt %d/%d failed: %s: %s. No more retries.",
                    attempt,
                    max_attempts,
                    type(e).__name__,
                    str(e),
                )

    assert last_exception is not None
    raise last_exception
