"""
URL utility functions for link discovery.
"""

from __future__ import annotations

from urllib import parse


def extract_domain(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except ValueError:
        return "unknown"


def is_absolute_http_url(url: str) -> bool:
    """Return ``True`` for a well-formed absolute ``http``/``https`` URL."""
    try:
        parsed = parse.urlparse(url.strip())
    except (ValueError, AttributeError):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def strip_fragment(url: str) -> str:
    """Drop the ``#fragment`` part of a URL."""
    return parse.urldefrag(url)[0]


def page_key(url: str) -> str:
    """Comparison key for a page: no fragment, no trailing slash."""
    return strip_fragment(url).rstrip("/")


def same_document(first: str, second: str) -> bool:
    """Whether two addresses point at the same page, ignoring fragments.

    ``/privacy#cookies`` and ``/privacy`` load the same document, so a
    privacy link and a cookie link that differ only by anchor are a
    combined policy page.
    """
    return page_key(first) == page_key(second)


def resolve(base: str, address: str) -> str:
    """Resolve *address* against *base*; absolute addresses pass through."""
    return parse.urljoin(base, address)
