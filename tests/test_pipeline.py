"""Tests for compliance_scout.pipeline.scraping — end-to-end scraping runs."""

from __future__ import annotations

import asyncio

import pytest
from playwright import async_api

from compliance_scout.browser.setup import BrowserRuntime
from compliance_scout.config import ScraperSettings
from compliance_scout.models.browser import NavigationPolicy
from compliance_scout.pipeline.scraping import discover_and_extract
from compliance_scout.utils.errors import PipelineError
from tests.fakes import (
    ROOT_URL,
    FakeNavigator,
    FakePage,
    make_link,
    navigator_factory_for,
    unconfigured_extractor,
)


def _run(navigator: FakeNavigator, extractor, settings: ScraperSettings, url: str = ROOT_URL):
    return asyncio.run(
        discover_and_extract(
            url,
            settings=settings,
            navigator_factory=navigator_factory_for(navigator),
            extractor=extractor,
        )
    )


# ── Scenarios ───────────────────────────────────────────────────


class TestFooterPrivacyOnly:
    """Root page with only a footer "Privacy Policy" link."""

    def _navigator(self) -> FakeNavigator:
        root = FakePage(
            ROOT_URL,
            anchors=[make_link("Home", ROOT_URL)],
            footer_anchors=[make_link("Privacy Policy", "/privacy")],
        )
        privacy = FakePage("https://example.com/privacy", text="Our privacy policy text.")
        return FakeNavigator([root, privacy])

    def test_unreachable_service(self, settings, strategy) -> None:
        result = _run(self._navigator(), unconfigured_extractor(strategy), settings)
        assert result.privacy_policy is not None
        assert result.privacy_policy.status == "failed"
        assert result.terms_of_service is None
        assert result.cookie_policy is None
        texts = result.as_texts()
        assert texts["privacyPolicy"].startswith("Failed to extract privacy policy")
        assert texts["termsOfService"] is None
        assert texts["cookiePolicy"] is None

    def test_relative_link_is_resolved(self, settings, make_extractor) -> None:
        navigator = self._navigator()
        extractor, _ = make_extractor(["Privacy body", "No cookie information found"])
        result = _run(navigator, extractor, settings)
        assert "https://example.com/privacy" in navigator.loaded_urls
        assert result.privacy_policy.text == "Privacy body"
        assert result.privacy_policy.source_url == "https://example.com/privacy"
        assert result.cookie_policy is None

    def test_cookie_derived_from_privacy(self, settings, make_extractor) -> None:
        extractor, service = make_extractor(["Privacy body", "Cookie sections"])
        result = _run(self._navigator(), extractor, settings)
        assert result.cookie_policy.text == "Cookie sections"
        assert result.cookie_policy.derived
        assert len(service.calls) == 2


class TestSharedPrivacyCookiePage:
    def test_exactly_one_combined_call(self, settings, make_extractor) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/privacy#cookies"),
            ],
        )
        page = FakePage("https://example.com/privacy", text="Privacy and cookies page.")
        navigator = FakeNavigator([root, page, FakePage("https://example.com/privacy#cookies")])
        extractor, service = make_extractor(["PRIVACY POLICY:\nP body\nCOOKIE POLICY:\nC body"])
        result = _run(navigator, extractor, settings)
        assert len(service.calls) == 1
        assert result.privacy_policy.text == "P body"
        assert result.cookie_policy.text == "C body"
        assert navigator.loaded_urls.count("https://example.com/privacy") == 1
        assert "https://example.com/privacy#cookies" not in navigator.loaded_urls


class TestAllThreeDocuments:
    def test_each_document_extracted(self, settings, make_extractor) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
            ],
        )
        pages = [
            root,
            FakePage("https://example.com/terms", text="terms page"),
            FakePage("https://example.com/privacy", text="privacy page"),
            FakePage("https://example.com/cookies", text="cookie page"),
        ]
        navigator = FakeNavigator(pages)
        extractor, service = make_extractor(["Doc one", "Doc two", "Doc three"])
        result = _run(navigator, extractor, settings)
        assert all(doc.is_found for doc in (result.terms_of_service, result.privacy_policy, result.cookie_policy))
        assert len(service.calls) == 3
        assert navigator.open_pages == 0

    def test_document_page_failure_is_isolated(self, settings, make_extractor) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
            ],
        )
        navigator = FakeNavigator(
            [root, FakePage("https://example.com/privacy", text="privacy page"), FakePage("https://example.com/cookies")],
            failing={"https://example.com/terms": None},
        )
        extractor, _ = make_extractor(["Doc", "Doc"])
        result = _run(navigator, extractor, settings)
        assert result.terms_of_service.status == "failed"
        assert "ERR_CONNECTION_REFUSED" in result.terms_of_service.reason
        assert result.privacy_policy.is_found
        assert result.cookie_policy.is_found
        terms_loads = [policy for url, policy in navigator.loads if url == "https://example.com/terms"]
        assert terms_loads == [NavigationPolicy.FAST, NavigationPolicy.PATIENT]

    def test_page_error_after_load_is_isolated(self, settings, make_extractor) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
            ],
        )
        navigating = async_api.Error("Page.content: Unable to retrieve content because the page is navigating")
        navigator = FakeNavigator(
            [
                root,
                FakePage("https://example.com/terms", text_error=navigating),
                FakePage("https://example.com/privacy", text="privacy page"),
                FakePage("https://example.com/cookies", text="cookie page"),
            ]
        )
        extractor, _ = make_extractor(["Doc", "Doc"])
        result = _run(navigator, extractor, settings)
        assert result.terms_of_service.status == "failed"
        assert "page is navigating" in result.terms_of_service.reason
        assert result.privacy_policy.is_found
        assert result.cookie_policy.is_found
        assert navigator.open_pages == 0

    def test_page_error_on_shared_page_fails_both(self, settings, make_extractor) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/privacy#cookies"),
            ],
        )
        closed = async_api.Error("Target page, context or browser has been closed")
        navigator = FakeNavigator([root, FakePage("https://example.com/privacy", text_error=closed)])
        extractor, service = make_extractor([])
        result = _run(navigator, extractor, settings)
        assert result.privacy_policy.status == result.cookie_policy.status == "failed"
        assert "has been closed" in result.cookie_policy.reason
        assert service.calls == []


# ── Root page handling ──────────────────────────────────────────


class TestRootPage:
    def test_falls_back_to_other_policy(self, settings, strategy) -> None:
        root = FakePage(ROOT_URL)
        navigator = FakeNavigator([root], failing={ROOT_URL: {NavigationPolicy.FAST}})
        result = _run(navigator, unconfigured_extractor(strategy), settings)
        assert navigator.loads[:2] == [(ROOT_URL, NavigationPolicy.FAST), (ROOT_URL, NavigationPolicy.PATIENT)]
        assert result.terms_of_service is None

    def test_root_failure_raises(self, settings, strategy) -> None:
        navigator = FakeNavigator(failing={ROOT_URL: None})
        with pytest.raises(PipelineError, match="Failed to scrape website https://example.com/"):
            _run(navigator, unconfigured_extractor(strategy), settings)

    def test_dismisses_consent_on_root(self, settings, strategy) -> None:
        root = FakePage(ROOT_URL)
        _run(FakeNavigator([root]), unconfigured_extractor(strategy), settings)
        assert root.consent_checks == 1


# ── Entry point checks ──────────────────────────────────────────


class TestEntryPoint:
    def test_invalid_url(self, settings, strategy) -> None:
        with pytest.raises(ValueError):
            _run(FakeNavigator(), unconfigured_extractor(strategy), settings, url="not a url")

    def test_sample_mode(self, strategy) -> None:
        settings = ScraperSettings(scraper_mode="sample")
        navigator = FakeNavigator()
        result = _run(navigator, unconfigured_extractor(strategy), settings, url="https://shop.example")
        assert navigator.loads == []
        assert result.terms_of_service.text.startswith("TERMS OF SERVICE FOR https://shop.example")
        assert result.cookie_policy.is_found

    def test_runtime_not_ready(self, settings, strategy) -> None:
        runtime = BrowserRuntime(ready=False, detail="Browser cache not found")
        with pytest.raises(PipelineError, match="Browser runtime not ready"):
            asyncio.run(
                discover_and_extract(
                    ROOT_URL,
                    settings=settings,
                    runtime=runtime,
                    extractor=unconfigured_extractor(strategy),
                )
            )
