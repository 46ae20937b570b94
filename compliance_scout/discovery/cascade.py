"""
Three-pass compliance link discovery.

Passes run strictly in order, and each later pass runs only while a
category is still unresolved:

``MAIN_PAGE``  every anchor on the root page
``FOOTER``     anchors inside the first footer-like container
``MENU``       anchors on up to N "about"/"legal"/"help" pages

Results merge main > footer > menu; a slot filled by an earlier pass is
never overwritten.
"""

from __future__ import annotations

import contextlib
import enum
from collections.abc import Sequence
from typing import Protocol

import pydantic
from playwright import async_api

from compliance_scout.discovery import classifier, keywords
from compliance_scout.models import browser, links
from compliance_scout.utils import errors, logger

log = logger.create_logger("Discovery")

DEFAULT_MAX_SECONDARY_PAGES = 3


class AnchorSource(Protocol):
    """A loaded page the cascade can read anchors from."""

    @property
    def url(self) -> str: ...

    async def list_anchors(self) -> list[links.Link]: ...

    async def list_anchors_within(self, selectors: Sequence[str]) -> list[links.Link]: ...


class PageLoader(Protocol):
    """Opens secondary pages for the menu pass."""

    def load(
        self,
        url: str,
        policy: browser.NavigationPolicy | None = None,
    ) -> contextlib.AbstractAsyncContextManager[AnchorSource]: ...


class CascadePass(enum.StrEnum):
    """States of the discovery cascade."""

    MAIN_PAGE = "main-page"
    FOOTER = "footer"
    MENU = "menu"
    RESOLVED = "resolved"


class DiscoveryOutcome(pydantic.BaseModel):
    """Merged links plus what each pass contributed."""

    resolved: links.ComplianceLinkSet
    main_page: links.ComplianceLinkSet
    footer: links.ComplianceLinkSet | None = None
    menu: links.ComplianceLinkSet | None = None
    passes: list[CascadePass] = pydantic.Field(default_factory=list)
    secondary_pages_visited: list[str] = pydantic.Field(default_factory=list)


class LinkDiscoveryCascade:
    """Resolves terms, privacy and cookie links for one root page."""

    def __init__(self, loader: PageLoader, *, max_secondary_pages: int = DEFAULT_MAX_SECONDARY_PAGES) -> None:
        self._loader = loader
        self._max_secondary_pages = max_secondary_pages

    async def discover(self, root: AnchorSource) -> DiscoveryOutcome:
        """Run the cascade against an already-loaded root page."""
        log.start_timer("link-discovery")

        anchors = await root.list_anchors()
        main = classifier.classify_links(anchors)
        outcome = DiscoveryOutcome(resolved=main, main_page=main, passes=[CascadePass.MAIN_PAGE])
        log.info("Main page pass", {"anchors": len(anchors), "missing": [c.value for c in main.missing()]})

        if not outcome.resolved.is_complete:
            footer_anchors = await root.list_anchors_within(keywords.FOOTER_SELECTORS)
            outcome.footer = classifier.classify_links(footer_anchors)
            outcome.resolved = outcome.resolved.merge(outcome.footer)
            outcome.passes.append(CascadePass.FOOTER)
            log.info(
                "Footer pass",
                {"anchors": len(footer_anchors), "missing": [c.value for c in outcome.resolved.missing()]},
            )

        if not outcome.resolved.is_complete:
            outcome.menu = await self._menu_pass(root, anchors, outcome)
            outcome.resolved = outcome.resolved.merge(outcome.menu)
            outcome.passes.append(CascadePass.MENU)
            log.info(
                "Menu pass",
                {
                    "pagesVisited": len(outcome.secondary_pages_visited),
                    "missing": [c.value for c in outcome.resolved.missing()],
                },
            )

        outcome.passes.append(CascadePass.RESOLVED)
        for category in links.LinkCategory:
            link = outcome.resolved.get(category)
            log.info(f"Found {category.value} link", {"address": link.address if link else None})
        log.end_timer("link-discovery", "Link discovery complete")
        return outcome

    async def _menu_pass(
        self,
        root: AnchorSource,
        anchors: Sequence[links.Link],
        outcome: DiscoveryOutcome,
    ) -> links.ComplianceLinkSet:
        """Visit secondary pages until every category resolves or the budget runs out."""
        candidates = classifier.find_secondary_page_candidates(
            anchors,
            exclude=outcome.resolved.addresses | {root.url},
        )
        found = links.ComplianceLinkSet()

        for candidate in candidates[: self._max_secondary_pages]:
            outcome.secondary_pages_visited.append(candidate.address)
            try:
                async with self._loader.load(candidate.address) as page:
                    page_links = classifier.classify_links(await page.list_anchors())
            except (errors.NavigationError, async_api.Error) as exc:
                log.warn(
                    "Skipping secondary page",
                    {"address": candidate.address, "error": errors.get_error_message(exc)},
                )
                continue

            found = found.merge(page_links)
            if outcome.resolved.merge(found).is_complete:
                log.debug("All links resolved, stopping menu pass early")
                break

        return found
