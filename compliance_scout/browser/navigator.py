"""
Page navigation for the discovery pipeline.

``PageNavigator.load`` opens a page, navigates it under a navigation
policy, and guarantees the page is closed when the caller's step ends,
including on error. The yielded ``LoadedPage`` exposes the only DOM
operations the pipeline needs: listing anchors, listing anchors within
a container, reading policy text, and dismissing a consent dialog.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Sequence
from typing import Any

from playwright import async_api

from compliance_scout.browser import dom_queries, session as session_mod
from compliance_scout.discovery import keywords
from compliance_scout.extraction import content
from compliance_scout.models import browser, links
from compliance_scout.utils import errors, logger

log = logger.create_logger("Navigator")

DEFAULT_CONSENT_TIMEOUT_S = 1.0


def _parse_anchors(raw: Any) -> list[links.Link]:
    """Convert the JSON returned by an anchor query into ``Link`` models."""
    if not isinstance(raw, list):
        return []
    parsed: list[links.Link] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("address"):
            continue
        parsed.append(
            links.Link(
                text=item.get("text", ""),
                address=item["address"],
                in_footer=bool(item.get("inFooter")),
                in_header=bool(item.get("inHeader")),
            )
        )
    return parsed


class LoadedPage:
    """A page that finished loading and is owned by the current step."""

    def __init__(
        self,
        page: async_api.Page,
        requested_url: str,
        policy: browser.NavigationPolicy,
        *,
        consent_timeout_s: float = DEFAULT_CONSENT_TIMEOUT_S,
    ) -> None:
        self._page = page
        self.requested_url = requested_url
        self.policy = policy
        self._consent_timeout_s = consent_timeout_s

    @property
    def url(self) -> str:
        """The final URL after redirects."""
        return self._page.url or self.requested_url

    async def list_anchors(self) -> list[links.Link]:
        """Return every anchor on the page, in DOM order."""
        return _parse_anchors(await self._page.evaluate(dom_queries.LIST_ANCHORS))

    async def list_anchors_within(self, selectors: Sequence[str]) -> list[links.Link]:
        """Return the anchors inside the first container matching *selectors*."""
        return _parse_anchors(await self._page.evaluate(dom_queries.LIST_ANCHORS_WITHIN, list(selectors)))

    async def extract_visible_text(self, char_limit: int | None = content.DEFAULT_CHAR_LIMIT) -> str:
        """Return the cleaned policy text of the page."""
        html = await self._page.content()
        return content.extract_policy_text(html, char_limit=char_limit)

    async def dismiss_consent_if_present(self, timeout_s: float | None = None) -> bool:
        """Click the first accept/agree/continue control, if one shows up quickly.

        Never raises and never waits longer than *timeout_s*; a page
        without a consent dialog costs at most that long.
        """
        try:
            clicked = await asyncio.wait_for(
                self._page.evaluate(dom_queries.DISMISS_CONSENT, list(keywords.CONSENT_ACCEPT_KEYWORDS)),
                timeout=timeout_s or self._consent_timeout_s,
            )
        except (TimeoutError, async_api.Error) as exc:
            log.debug("Consent dismissal skipped", {"url": self.requested_url, "error": errors.get_error_message(exc)})
            return False
        if clicked:
            log.debug("Dismissed consent dialog", {"url": self.requested_url, "button": clicked})
            return True
        return False


class PageNavigator:
    """Loads pages from a shared browser session under a navigation policy."""

    def __init__(
        self,
        session: session_mod.BrowserSession,
        *,
        default_policy: browser.NavigationPolicy = browser.NavigationPolicy.FAST,
        consent_timeout_s: float = DEFAULT_CONSENT_TIMEOUT_S,
    ) -> None:
        self._session = session
        self.default_policy = default_policy
        self._consent_timeout_s = consent_timeout_s

    @contextlib.asynccontextmanager
    async def load(
        self,
        url: str,
        policy: browser.NavigationPolicy | None = None,
    ) -> AsyncIterator[LoadedPage]:
        """Open *url* in a fresh page and close it when the block exits.

        Raises:
            NavigationError: The page did not load within the policy's
                timeout, or answered with an error status.
        """
        policy = policy or self.default_policy
        page = await self._session.new_page()
        try:
            await self._goto(page, url, policy)
            yield LoadedPage(page, url, policy, consent_timeout_s=self._consent_timeout_s)
        finally:
            await self._session.close_page(page)

    async def _goto(self, page: async_api.Page, url: str, policy: browser.NavigationPolicy) -> None:
        log.debug("Navigating", {"url": url, "waitUntil": policy.wait_until, "timeout": policy.timeout_ms})
        try:
            response = await page.goto(url, wait_until=policy.wait_until, timeout=policy.timeout_ms)
        except async_api.Error as exc:
            log.warn("Navigation error", {"url": url, "policy": policy.value, "error": str(exc)})
            raise errors.NavigationError(url, policy.value, str(exc)) from exc

        status_code = response.status if response else None
        # 402 is used by paywalled sites that still render the full page.
        if status_code and status_code >= 400 and status_code != 402:
            status_text = response.status_text if response else ""
            raise errors.NavigationError(url, policy.value, f"HTTP {status_code} {status_text}".strip())

        if page.url and page.url != url:
            log.info("Redirected", {"from": url, "to": page.url})
