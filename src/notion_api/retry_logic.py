"""Retry logic with exponential backoff for Notion API rate limits.

This module provides retry functionality for 429 rate limit responses from
the Notion API. It implements exponential backoff (1s, 2s, 4s) and fails fast
for non-rate-limit errors. Waiting uses asyncio.sleep so other documents keep
making progress while one request backs off.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3


class RateLimitedError(Exception):
    """Raised by a request callable when the API answers 429."""

    def __init__(self, retry_after: float = 0.0):
        super().__init__("HTTP 429 rate limited")
        self.status_code = 429
        self.retry_after = retry_after


async def retry_on_rate_limit(func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
    """Retry coroutine function on 429 rate limit with exponential backoff.

    Awaits the given coroutine function with the provided arguments, retrying
    up to 3 times with exponential backoff (1s, 2s, 4s) when a rate limit
    error is encountered. Fails fast for all other errors.

    Args:
        func: The coroutine function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If rate limit persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> result = await retry_on_rate_limit(api.list_block_children, "abc")
    """
    for retry_num in range(MAX_RETRIES + 1):  # 0, 1, 2, 3 = 4 attempts total
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Rate limit persisted after {MAX_RETRIES} retries, giving up"
                )
                raise APIAccessError("Notion API failure (after 3 retries)")

            # Honour Retry-After when the server sends a longer wait
            wait_time = max(2 ** retry_num, getattr(e, 'retry_after', 0) or 0)
            logger.info(
                f"Rate limit hit, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            await asyncio.sleep(wait_time)

    raise APIAccessError("Notion API failure (after 3 retries)")


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a rate limit (429) error.

    Args:
        exception: The exception to check

    Returns:
        True if this appears to be a rate limit error, False otherwise
    """
    if isinstance(exception, RateLimitedError):
        return True

    # No bare '429' check: object ids can contain those digits
    error_msg = str(exception).lower()
    rate_limit_patterns = [
        'too many requests',
        'rate_limited',
        'rate limited',
    ]
    if any(pattern in error_msg for pattern in rate_limit_patterns):
        return True

    if getattr(exception, 'status_code', None) == 429:
        return True

    response = getattr(exception, 'response', None)
    if response is not None and getattr(response, 'status_code', None) == 429:
        return True

    return False
