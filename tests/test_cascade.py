"""Tests for compliance_scout.discovery.cascade — three-pass link discovery."""

from __future__ import annotations

import asyncio

from compliance_scout.discovery.cascade import CascadePass, LinkDiscoveryCascade
from tests.fakes import ROOT_URL, FakeNavigator, FakePage, make_link


def _discover(root: FakePage, navigator: FakeNavigator, max_secondary_pages: int = 3):
    cascade = LinkDiscoveryCascade(navigator, max_secondary_pages=max_secondary_pages)
    return asyncio.run(cascade.discover(root))


# ── Pass ordering ───────────────────────────────────────────────


class TestPassOrdering:
    def test_complete_main_page_skips_later_passes(self) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
                make_link("About", "https://example.com/about"),
            ],
        )
        navigator = FakeNavigator()
        outcome = _discover(root, navigator)
        assert outcome.resolved.is_complete
        assert outcome.passes == [CascadePass.MAIN_PAGE, CascadePass.RESOLVED]
        assert root.footer_queries == 0
        assert navigator.loads == []

    def test_footer_pass_fills_missing(self) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[make_link("Terms", "https://example.com/terms")],
            footer_anchors=[
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookie settings", "https://example.com/cookies"),
            ],
        )
        outcome = _discover(root, FakeNavigator())
        assert outcome.resolved.is_complete
        assert outcome.passes == [CascadePass.MAIN_PAGE, CascadePass.FOOTER, CascadePass.RESOLVED]

    def test_menu_pass_runs_when_still_incomplete(self) -> None:
        root = FakePage(ROOT_URL, anchors=[make_link("About", "https://example.com/about")])
        about = FakePage(
            "https://example.com/about",
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
            ],
        )
        outcome = _discover(root, FakeNavigator([about]))
        assert outcome.resolved.is_complete
        assert CascadePass.MENU in outcome.passes
        assert outcome.secondary_pages_visited == ["https://example.com/about"]


# ── Merge precedence ────────────────────────────────────────────


class TestMergePrecedence:
    def test_earlier_pass_is_never_overwritten(self) -> None:
        main_privacy = make_link("Privacy", "https://example.com/privacy")
        root = FakePage(
            ROOT_URL,
            anchors=[main_privacy, make_link("About", "https://example.com/about")],
            footer_anchors=[
                make_link("Privacy notice", "https://example.com/footer-privacy"),
                make_link("Terms", "https://example.com/footer-terms"),
            ],
        )
        about = FakePage(
            "https://example.com/about",
            anchors=[
                make_link("Terms", "https://example.com/menu-terms"),
                make_link("Privacy", "https://example.com/menu-privacy"),
                make_link("Cookies", "https://example.com/menu-cookies"),
            ],
        )
        outcome = _discover(root, FakeNavigator([about]))
        assert outcome.resolved.privacy_link == main_privacy
        assert outcome.resolved.terms_link.address == "https://example.com/footer-terms"
        assert outcome.resolved.cookie_link.address == "https://example.com/menu-cookies"


# ── Menu pass limits ────────────────────────────────────────────


class TestMenuPass:
    def test_visits_at_most_three_pages(self) -> None:
        anchors = [make_link(f"About {i}", f"https://example.com/about/{i}") for i in range(6)]
        root = FakePage(ROOT_URL, anchors=anchors)
        pages = [FakePage(link.address) for link in anchors]
        navigator = FakeNavigator(pages)
        outcome = _discover(root, navigator)
        assert len(navigator.loads) == 3
        assert len(outcome.secondary_pages_visited) == 3
        assert outcome.resolved.missing()

    def test_stops_early_once_complete(self) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("About", "https://example.com/about"),
                make_link("Help", "https://example.com/help"),
                make_link("About the company", "https://example.com/company"),
            ],
        )
        about = FakePage(
            "https://example.com/about",
            anchors=[
                make_link("Terms", "https://example.com/terms"),
                make_link("Privacy", "https://example.com/privacy"),
                make_link("Cookies", "https://example.com/cookies"),
            ],
        )
        navigator = FakeNavigator([about, FakePage("https://example.com/help")])
        outcome = _discover(root, navigator)
        assert navigator.loaded_urls == ["https://example.com/about"]
        assert outcome.resolved.is_complete

    def test_navigation_errors_are_skipped(self) -> None:
        root = FakePage(
            ROOT_URL,
            anchors=[
                make_link("About", "https://example.com/about"),
                make_link("Help", "https://example.com/help"),
            ],
        )
        help_page = FakePage("https://example.com/help", anchors=[make_link("Privacy", "https://example.com/privacy")])
        navigator = FakeNavigator([help_page], failing={"https://example.com/about": None})
        outcome = _discover(root, navigator)
        assert navigator.loaded_urls == ["https://example.com/about", "https://example.com/help"]
        assert outcome.resolved.privacy_link.address == "https://example.com/privacy"

    def test_skips_root_page_itself(self) -> None:
        root = FakePage(ROOT_URL, anchors=[make_link("About", ROOT_URL)])
        navigator = FakeNavigator()
        _discover(root, navigator)
        assert navigator.loads == []

    def test_zero_budget_visits_nothing(self) -> None:
        root = FakePage(ROOT_URL, anchors=[make_link("About", "https://example.com/about")])
        navigator = FakeNavigator([FakePage("https://example.com/about")])
        outcome = _discover(root, navigator, max_secondary_pages=0)
        assert navigator.loads == []
        assert outcome.secondary_pages_visited == []
