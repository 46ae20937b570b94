"""
Retry utility with capped exponential backoff for handling transient failures.
Used for text-extraction calls, where rate limits (429) are the common case.

Attempt ``k`` waits ``min(2**k * 1000, 4000)`` ms before it runs.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from compliance_scout.utils import errors, logger

log = logger.create_logger("Retry")

T = TypeVar("T")

BASE_DELAY_MS = 1000
MAX_DELAY_MS = 4000


def backoff_delay_ms(attempt: int, *, base_ms: int = BASE_DELAY_MS, max_ms: int = MAX_DELAY_MS) -> int:
    """Return the wait before retry *attempt* (1-based), in milliseconds."""
    if attempt <= 0:
        return 0
    return min(2**attempt * base_ms, max_ms)


def is_rate_limit_error(error: BaseException) -> bool:
    """Check if the error is a rate limit (429) error."""
    if isinstance(error, errors.ExtractionServiceError):
        return error.rate_limited
    err_str = str(error).lower()
    if "429" in err_str or "rate limit" in err_str:
        return True
    for attr in ("status", "status_code"):
        if getattr(error, attr, None) == 429:
            return True
    return False


def is_retryable_error(error: BaseException) -> bool:
    """Check if the error is retryable (rate limit, server or connection error)."""
    if isinstance(error, errors.ExtractionServiceError):
        return error.retryable
    if is_rate_limit_error(error):
        return True
    for attr in ("status", "status_code"):
        status = getattr(error, attr, None)
        if isinstance(status, int) and 500 <= status < 600:
            return True
    return type(error).__name__ in ("ConnectionError", "TimeoutError", "ConnectionResetError")


def get_retry_after_ms(error: BaseException) -> int | None:
    """Try to extract retry-after information from the error."""
    if isinstance(error, errors.ExtractionServiceError) and error.retry_after_ms is not None:
        return error.retry_after_ms
    headers = getattr(error, "headers", None)
    if isinstance(headers, dict):
        retry_after = headers.get("retry-after") or headers.get("Retry-After")
        if retry_after:
            try:
                return int(retry_after) * 1000
            except (ValueError, TypeError):
                pass
    return None


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    max_delay_ms: int = MAX_DELAY_MS,
    context: str | None = None,
) -> T:
    """
    Execute an async function, retrying transient failures.

    Non-retryable errors are re-raised immediately. When every attempt
    fails the last error is re-raised.
    """
    last_error: BaseException | None = None

    for attempt in range(max_attempts):
        if attempt > 0:
            delay = backoff_delay_ms(attempt, max_ms=max_delay_ms)
            if last_error is not None and is_rate_limit_error(last_error):
                retry_after_ms = get_retry_after_ms(last_error)
                if retry_after_ms is not None:
                    delay = min(max(delay, retry_after_ms), max_delay_ms)
            log.warn(
                "Retrying after transient error",
                {
                    "context": context,
                    "attempt": attempt,
                    "maxAttempts": max_attempts,
                    "delayMs": delay,
                    "isRateLimit": last_error is not None and is_rate_limit_error(last_error),
                },
            )
            await asyncio.sleep(delay / 1000)

        try:
            return await fn()
        except Exception as error:
            last_error = error
            if not is_retryable_error(error):
                raise
            if attempt + 1 >= max_attempts:
                log.warn(
                    "All retry attempts exhausted",
                    {"context": context, "attempts": attempt + 1, "error": errors.get_error_message(error)},
                )
                raise

    # Only reachable with max_attempts < 1.
    raise ValueError("max_attempts must be at least 1")
