"""
Policy text extraction from page HTML.

Works on a detached copy of the DOM (the HTML snapshot of a loaded
page), so removing noise never touches the live page:

1. Drop navigational chrome, cookie banners, ads and sidebars.
2. Pick the first likely policy container with real content, falling
   back to ``<body>``.
3. Serialise its text nodes (skipping ``<script>``/``<style>``), one per
   line, with runs of blank lines collapsed.
4. Cap the result so the extraction prompt stays bounded.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, element

NOISE_SELECTORS: tuple[str, ...] = (
    "header",
    "nav",
    "footer",
    ".header",
    ".footer",
    ".navigation",
    ".menu",
    ".cookie-banner",
    ".cookie-notice",
    ".sidebar",
    ".ads",
    ".advertisement",
)

POLICY_CONTAINER_SELECTORS: tuple[str, ...] = (
    ".privacy-policy",
    ".privacy",
    ".policy-content",
    ".cookie-policy",
    "#privacy-policy",
    "#cookie-policy",
    ".terms-content",
    ".legal-content",
    '[data-content="privacy"]',
    '[data-content="policy"]',
    "article",
    "main",
    ".main-content",
    ".content-main",
    ".content",
)

MIN_CONTAINER_TEXT_LENGTH = 200
DEFAULT_CHAR_LIMIT = 80_000
TRUNCATION_MARKER = "...[truncated]"

_EXCLUDED_PARENTS = frozenset({"script", "style"})
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def remove_noise(soup: BeautifulSoup) -> None:
    """Remove navigation, footer, banner and ad containers in place."""
    for selector in NOISE_SELECTORS:
        for node in soup.select(selector):
            # A match nested inside an already-removed container is gone too.
            if not node.decomposed:
                node.decompose()


def find_policy_container(soup: BeautifulSoup) -> element.Tag:
    """Return the first policy container holding more than 200 characters."""
    for selector in POLICY_CONTAINER_SELECTORS:
        container = soup.select_one(selector)
        if container is not None and len(container.get_text().strip()) > MIN_CONTAINER_TEXT_LENGTH:
            return container
    return soup.body or soup


def serialize_text(root: element.Tag) -> str:
    """Join the non-blank text nodes under *root* with newlines."""
    parts: list[str] = []
    for node in root.find_all(string=True):
        if isinstance(node, element.PreformattedString):
            continue  # comments, doctype, CDATA
        if not node.strip():
            continue
        if any(parent.name in _EXCLUDED_PARENTS for parent in node.parents):
            continue
        parts.append(str(node))
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(parts))


def truncate_content(text: str, limit: int = DEFAULT_CHAR_LIMIT) -> str:
    """Cap *text* at *limit* characters, appending the truncation marker."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def extract_policy_text(html: str, *, char_limit: int | None = DEFAULT_CHAR_LIMIT) -> str:
    """Return the cleaned, size-capped policy text of an HTML document.

    Args:
        html: Serialised page HTML.
        char_limit: Maximum characters kept before the truncation
            marker, or ``None`` for no cap.
    """
    soup = BeautifulSoup(html or "", "lxml")
    remove_noise(soup)
    text = serialize_text(find_policy_container(soup))
    if char_limit is None:
        return text
    return truncate_content(text, char_limit)


def content_preview(text: str, edge: int = 500) -> str:
    """Return the head and tail of *text* for log output."""
    if len(text) <= edge * 2:
        return text
    omitted = len(text) - edge * 2
    return f"{text[:edge]}\n... [{omitted} characters omitted] ...\n{text[-edge:]}"
