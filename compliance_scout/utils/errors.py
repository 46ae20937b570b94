"""
Error types raised by the discovery pipeline, plus helpers for
consistent error message extraction.

Classification misses are never errors: an unresolved link is
represented as ``None`` on the link set.
"""

from __future__ import annotations


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    Falls back to the exception class name when the message is empty.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"


class NavigationError(Exception):
    """A page failed to load within the navigation policy's timeout."""

    def __init__(self, url: str, policy: str, detail: str) -> None:
        self.url = url
        self.policy = policy
        self.detail = detail
        super().__init__(f"Navigation to {url} failed ({policy}): {detail}")


class ExtractionServiceError(Exception):
    """A text-extraction (chat completion) call failed.

    Attributes:
        rate_limited: The service signalled rate limiting (HTTP 429).
        retryable: The failure is transient and worth another attempt.
        status_code: HTTP status returned by the service, if any.
        retry_after_ms: Server-suggested delay before retrying, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        rate_limited: bool = False,
        retryable: bool = False,
        status_code: int | None = None,
        retry_after_ms: int | None = None,
    ) -> None:
        self.rate_limited = rate_limited
        self.retryable = retryable or rate_limited
        self.status_code = status_code
        self.retry_after_ms = retry_after_ms
        super().__init__(message)


class PipelineError(Exception):
    """The whole request failed: the root page or the browser was unusable."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Failed to scrape website {url}: {detail}")
