"""Tests for compliance_scout.utils.url — URL helpers."""

from __future__ import annotations

import pytest

from compliance_scout.utils.url import (
    extract_domain,
    is_absolute_http_url,
    page_key,
    resolve,
    same_document,
    strip_fragment,
)

# ── extract_domain ──────────────────────────────────────────────


class TestExtractDomain:
    """Tests for extract_domain()."""

    def test_simple_url(self) -> None:
        assert extract_domain("https://example.com/path") == "example.com"

    def test_url_with_port(self) -> None:
        assert extract_domain("https://example.com:8080/path") == "example.com"

    def test_invalid_url_returns_unknown(self) -> None:
        assert extract_domain("not a url") == "unknown"


# ── is_absolute_http_url ────────────────────────────────────────


class TestIsAbsoluteHttpUrl:
    """Tests for is_absolute_http_url()."""

    @pytest.mark.parametrize("url", ["https://example.com", "http://example.com/a?b=1", " https://e.co/ "])
    def test_valid(self, url: str) -> None:
        assert is_absolute_http_url(url)

    @pytest.mark.parametrize("url", ["", "example.com", "/privacy", "ftp://example.com", "https://", "mailto:a@b.c"])
    def test_invalid(self, url: str) -> None:
        assert not is_absolute_http_url(url)


# ── fragments and same-document checks ──────────────────────────


class TestSameDocument:
    def test_strip_fragment(self) -> None:
        assert strip_fragment("https://e.com/privacy#cookies") == "https://e.com/privacy"

    def test_fragment_only_difference(self) -> None:
        assert same_document("https://e.com/privacy", "https://e.com/privacy#cookies")

    def test_trailing_slash_difference(self) -> None:
        assert same_document("https://e.com/privacy/", "https://e.com/privacy")

    def test_different_pages(self) -> None:
        assert not same_document("https://e.com/privacy", "https://e.com/cookies")

    def test_page_key_drops_fragment_and_trailing_slash(self) -> None:
        assert page_key("https://e.com/#top") == page_key("https://e.com") == "https://e.com"


class TestResolve:
    def test_relative(self) -> None:
        assert resolve("https://e.com/en/", "privacy") == "https://e.com/en/privacy"

    def test_root_relative(self) -> None:
        assert resolve("https://e.com/en/", "/privacy") == "https://e.com/privacy"

    def test_absolute_passes_through(self) -> None:
        assert resolve("https://e.com/", "https://other.com/p") == "https://other.com/p"
