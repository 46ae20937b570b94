"""
URL → compliance documents.

Thin orchestrator over the discovery and extraction modules:

- load the root page (falling back to the other navigation policy)
- resolve terms / privacy / cookie links with the discovery cascade
- load each resolved link and extract its document concurrently,
  using one combined call when privacy and cookie share a page
- derive the cookie policy from the privacy policy when no cookie
  link was found

Only a root page (or browser launch) failure raises; every
per-document failure is carried in the returned ``DocumentResult``.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Protocol

from playwright import async_api

from compliance_scout import config
from compliance_scout.browser import navigator as navigator_mod
from compliance_scout.browser import session as browser_session
from compliance_scout.browser import setup
from compliance_scout.discovery import cascade
from compliance_scout.extraction import combined, extractor as extractor_mod, llm_client
from compliance_scout.models import browser, documents, links
from compliance_scout.pipeline import sample_data
from compliance_scout.utils import errors, logger
from compliance_scout.utils import url as url_mod

log = logger.create_logger("Scraper")


class ScrapablePage(cascade.AnchorSource, Protocol):
    """A loaded page the pipeline can read documents from."""

    async def extract_visible_text(self, char_limit: int | None = ...) -> str: ...

    async def dismiss_consent_if_present(self, timeout_s: float | None = None) -> bool: ...


class Navigator(Protocol):
    """Loads pages for one pipeline run."""

    def load(
        self,
        url: str,
        policy: browser.NavigationPolicy | None = None,
    ) -> contextlib.AbstractAsyncContextManager[ScrapablePage]: ...


NavigatorFactory = Callable[[str, config.ScraperSettings], contextlib.AbstractAsyncContextManager[Navigator]]


# ====================================================================
# Setup
# ====================================================================


@contextlib.asynccontextmanager
async def browser_navigator(
    url: str,
    settings: config.ScraperSettings,
) -> AsyncIterator[navigator_mod.PageNavigator]:
    """Launch a browser session for one run and close it afterwards.

    Raises:
        PipelineError: The browser could not be launched.
    """
    session = browser_session.BrowserSession(headless=settings.browser_headless)
    try:
        try:
            await session.launch_browser()
        except Exception as exc:
            raise errors.PipelineError(url, f"Browser launch failed: {errors.get_error_message(exc)}") from exc
        yield navigator_mod.PageNavigator(
            session,
            default_policy=settings.navigation_policy,
            consent_timeout_s=settings.consent_timeout_seconds,
        )
    finally:
        await session.close()


def build_extractor(
    settings: config.ScraperSettings,
    service: llm_client.CompletionService | None = None,
) -> extractor_mod.DocumentExtractor:
    """Create a document extractor for the configured backend."""
    if service is None:
        service = llm_client.create_completion_service()
    return extractor_mod.DocumentExtractor(
        service,
        settings.model_strategy(),
        unconfigured_reason=config.validate_llm_config(),
    )


# ====================================================================
# Link discovery
# ====================================================================


async def _discover_links(
    navigator: Navigator,
    url: str,
    settings: config.ScraperSettings,
) -> tuple[str, links.ComplianceLinkSet]:
    """Load the root page and run the discovery cascade on it.

    Returns:
        The root page's final URL and the resolved links.

    Raises:
        PipelineError: The root page failed under both navigation policies.
    """
    log.subsection("Link discovery")
    policies = (settings.navigation_policy, settings.navigation_policy.other())
    last_error: errors.NavigationError | async_api.Error | None = None

    for policy in policies:
        try:
            async with navigator.load(url, policy) as root:
                await root.dismiss_consent_if_present()
                discovery = cascade.LinkDiscoveryCascade(
                    navigator,
                    max_secondary_pages=settings.max_secondary_pages,
                )
                outcome = await discovery.discover(root)
                return root.url, outcome.resolved
        except (errors.NavigationError, async_api.Error) as exc:
            last_error = exc
            log.warn("Root page failed to load", {"url": url, "policy": policy.value, "error": str(exc)})

    detail = errors.get_error_message(last_error) if last_error else "Root page failed to load"
    raise errors.PipelineError(url, detail) from last_error


# ====================================================================
# Document extraction
# ====================================================================


async def _load_text(navigator: Navigator, address: str, settings: config.ScraperSettings) -> str:
    """Load *address* and return its cleaned text.

    A navigation failure is retried once under the other policy.
    """
    policy = settings.navigation_policy
    try:
        return await _read_page(navigator, address, policy, settings)
    except (errors.NavigationError, async_api.Error) as exc:
        log.warn("Retrying document page with other policy", {"url": address, "error": str(exc)})
        return await _read_page(navigator, address, policy.other(), settings)


async def _read_page(
    navigator: Navigator,
    address: str,
    policy: browser.NavigationPolicy,
    settings: config.ScraperSettings,
) -> str:
    async with navigator.load(address, policy) as page:
        await page.dismiss_consent_if_present()
        return await page.extract_visible_text(settings.content_char_limit)


async def _extract_document(
    navigator: Navigator,
    document_extractor: extractor_mod.DocumentExtractor,
    document_type: documents.DocumentType,
    address: str,
    settings: config.ScraperSettings,
) -> documents.DocumentResult:
    try:
        text = await _load_text(navigator, address, settings)
    except (errors.NavigationError, async_api.Error) as exc:
        return documents.DocumentResult.failed(document_type, errors.get_error_message(exc), address)
    return await document_extractor.extract(document_type, text, source_url=address)


async def _extract_combined(
    navigator: Navigator,
    document_extractor: extractor_mod.DocumentExtractor,
    address: str,
    settings: config.ScraperSettings,
) -> tuple[documents.DocumentResult, documents.DocumentResult]:
    try:
        text = await _load_text(navigator, address, settings)
    except (errors.NavigationError, async_api.Error) as exc:
        reason = errors.get_error_message(exc)
        return (
            documents.DocumentResult.failed(documents.DocumentType.PRIVACY, reason, address),
            documents.DocumentResult.failed(documents.DocumentType.COOKIE, reason, address),
        )
    return await combined.CombinedPolicySplitter(document_extractor).extract(text, address)


async def _extract_documents(
    navigator: Navigator,
    base_url: str,
    resolved: links.ComplianceLinkSet,
    document_extractor: extractor_mod.DocumentExtractor,
    settings: config.ScraperSettings,
) -> documents.ScrapingResult:
    """Extract every resolved document; pages load and extract concurrently."""
    log.subsection("Document extraction")

    def address_of(link: links.Link | None) -> str | None:
        return url_mod.resolve(base_url, link.address) if link else None

    terms_url = address_of(resolved.terms_link)
    privacy_url = address_of(resolved.privacy_link)
    cookie_url = address_of(resolved.cookie_link)
    shared_page = privacy_url is not None and cookie_url is not None and url_mod.same_document(privacy_url, cookie_url)

    result = documents.ScrapingResult()
    jobs: list[Awaitable[None]] = []

    async def run_terms(address: str) -> None:
        result.terms_of_service = await _extract_document(
            navigator, document_extractor, documents.DocumentType.TERMS, address, settings
        )

    async def run_privacy(address: str) -> None:
        result.privacy_policy = await _extract_document(
            navigator, document_extractor, documents.DocumentType.PRIVACY, address, settings
        )

    async def run_cookie(address: str) -> None:
        result.cookie_policy = await _extract_document(
            navigator, document_extractor, documents.DocumentType.COOKIE, address, settings
        )

    async def run_combined(address: str) -> None:
        result.privacy_policy, result.cookie_policy = await _extract_combined(
            navigator, document_extractor, address, settings
        )

    if terms_url:
        jobs.append(run_terms(terms_url))
    if shared_page and privacy_url:
        log.info("Privacy and cookie policies share a page", {"url": privacy_url})
        jobs.append(run_combined(privacy_url))
    else:
        if privacy_url:
            jobs.append(run_privacy(privacy_url))
        if cookie_url:
            jobs.append(run_cookie(cookie_url))

    await asyncio.gather(*jobs)

    if cookie_url is None and result.privacy_policy is not None:
        derived = await document_extractor.derive_cookie_policy(result.privacy_policy)
        if derived is not None and derived.status != "not-found":
            result.cookie_policy = derived

    return result


# ====================================================================
# Entry point
# ====================================================================


async def discover_and_extract(
    url: str,
    *,
    settings: config.ScraperSettings | None = None,
    runtime: setup.BrowserRuntime | None = None,
    navigator_factory: NavigatorFactory | None = None,
    extractor: extractor_mod.DocumentExtractor | None = None,
) -> documents.ScrapingResult:
    """Find and extract the terms, privacy and cookie documents of *url*.

    Args:
        url: Absolute http(s) address of the site's root page.
        settings: Scraper settings; read from the environment if omitted.
        runtime: Browser runtime handle from start-up.
        navigator_factory: Opens the page navigator for the run; defaults
            to a fresh headless browser session.
        extractor: Document extractor; built from the environment if omitted.

    Returns:
        The three documents. A document is ``None`` when no link for it
        was found (cookie excepted, when derived from privacy).

    Raises:
        ValueError: *url* is not an absolute http(s) URL.
        PipelineError: The browser could not start or the root page
            could not be loaded.
    """
    if not url_mod.is_absolute_http_url(url):
        raise ValueError(f"Invalid URL format: {url!r}")

    settings = settings or config.ScraperSettings()
    if settings.scraper_mode == "sample":
        log.info("Sample mode, returning canned documents", {"url": url})
        return sample_data.sample_result(url)

    if navigator_factory is None:
        if runtime is not None and not runtime.ready:
            raise errors.PipelineError(url, f"Browser runtime not ready: {runtime.detail}")
        navigator_factory = browser_navigator
    document_extractor = extractor or build_extractor(settings)

    log_file = logger.start_log_file(url_mod.extract_domain(url))
    log.section(f"Scraping {url}")
    if log_file:
        log.debug("Writing log file", {"path": log_file})
    log.start_timer("scrape")
    try:
        async with navigator_factory(url, settings) as navigator:
            base_url, resolved = await _discover_links(navigator, url, settings)
            result = await _extract_documents(navigator, base_url, resolved, document_extractor, settings)
    finally:
        log.end_timer("scrape", "Scrape finished")
        logger.end_log_file()

    log.success(
        "Scrape complete",
        {
            "terms": _status(result.terms_of_service),
            "privacy": _status(result.privacy_policy),
            "cookie": _status(result.cookie_policy),
        },
    )
    return result


def _status(result: documents.DocumentResult | None) -> str | None:
    return result.status if result else None

