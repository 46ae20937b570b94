"""Shared fixtures for the test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from unittest import mock

import pytest

from compliance_scout import config
from compliance_scout.extraction import extractor
from compliance_scout.models import browser
from tests import fakes

# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def no_sleep() -> Iterator[mock.AsyncMock]:
    """Skip retry backoff waits; the mock records requested delays."""
    with mock.patch("compliance_scout.utils.retry.asyncio.sleep", new_callable=mock.AsyncMock) as sleep:
        yield sleep


@pytest.fixture()
def strategy() -> browser.ModelStrategy:
    return browser.ModelStrategy(
        primary_model="primary-model",
        fallback_model="fallback-model",
        primary_timeout_s=60,
        fallback_timeout_s=30,
    )


@pytest.fixture()
def settings() -> config.ScraperSettings:
    return config.ScraperSettings(
        navigation_policy=browser.NavigationPolicy.FAST,
        scraper_mode="live",
        max_secondary_pages=3,
    )


@pytest.fixture()
def make_extractor(
    strategy: browser.ModelStrategy,
) -> Callable[..., tuple[extractor.DocumentExtractor, fakes.FakeCompletionService]]:
    """Build an extractor over a fake service with the given replies."""

    def _make(
        replies: Sequence[str | BaseException] = (),
    ) -> tuple[extractor.DocumentExtractor, fakes.FakeCompletionService]:
        service = fakes.FakeCompletionService(replies)
        return extractor.DocumentExtractor(service, strategy), service

    return _make
