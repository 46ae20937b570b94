"""Tests for compliance_scout.utils.errors — error types and message extraction."""

from __future__ import annotations

from compliance_scout.utils.errors import (
    ExtractionServiceError,
    NavigationError,
    PipelineError,
    get_error_message,
)


class TestGetErrorMessage:
    """Tests for get_error_message()."""

    def test_exception_with_message(self) -> None:
        assert get_error_message(ValueError("something broke")) == "something broke"

    def test_exception_without_message(self) -> None:
        assert get_error_message(ValueError()) == "ValueError"

    def test_timeout_without_message(self) -> None:
        assert get_error_message(TimeoutError()) == "TimeoutError"

    def test_non_exception(self) -> None:
        assert get_error_message("oops") == "Unknown error"


class TestErrorTypes:
    def test_navigation_error_message(self) -> None:
        err = NavigationError("https://e.com", "fast", "HTTP 500")
        assert str(err) == "Navigation to https://e.com failed (fast): HTTP 500"
        assert err.detail == "HTTP 500"

    def test_rate_limited_implies_retryable(self) -> None:
        err = ExtractionServiceError("429", rate_limited=True)
        assert err.retryable

    def test_service_error_defaults(self) -> None:
        err = ExtractionServiceError("bad request", status_code=400)
        assert not err.retryable
        assert not err.rate_limited
        assert err.retry_after_ms is None

    def test_pipeline_error_message(self) -> None:
        err = PipelineError("https://e.com", "browser launch failed")
        assert str(err) == "Failed to scrape website https://e.com: browser launch failed"
