"""
Link classification for compliance documents.

Pure functions over the anchors of one page: no browser access, no
ranking beyond DOM order. The first anchor satisfying a category's
keyword predicate fills that category's slot, and one anchor may fill
several slots (e.g. a combined "privacy & cookies" page).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from urllib import parse

from compliance_scout.discovery import keywords
from compliance_scout.models import links
from compliance_scout.utils import url as url_mod


def matches(link: links.Link, category: links.LinkCategory) -> bool:
    """Return ``True`` if *link*'s text or address contains a *category* keyword."""
    address = link.address.lower()
    # Decoded too, so ``/donn%C3%A9es-personnelles`` still matches.
    decoded = parse.unquote(address)
    return any(
        keyword in link.text or keyword in address or keyword in decoded
        for keyword in keywords.CATEGORY_KEYWORDS[category]
    )


def classify_links(candidates: Iterable[links.Link]) -> links.ComplianceLinkSet:
    """Resolve at most one link per category, first DOM-order match wins."""
    found: dict[links.LinkCategory, links.Link] = {}
    for link in candidates:
        for category in links.LinkCategory:
            if category not in found and matches(link, category):
                found[category] = link
        if len(found) == len(links.LinkCategory):
            break

    return links.ComplianceLinkSet(
        terms_link=found.get(links.LinkCategory.TERMS),
        privacy_link=found.get(links.LinkCategory.PRIVACY),
        cookie_link=found.get(links.LinkCategory.COOKIE),
    )


def find_secondary_page_candidates(
    candidates: Sequence[links.Link],
    *,
    exclude: Iterable[str] = (),
) -> list[links.Link]:
    """Return "about"/"legal"/"help" links worth visiting, in DOM order.

    Only http(s) addresses are kept, each address once, and any address
    in *exclude* (already resolved links, the page itself) is skipped.
    """
    seen = {url_mod.page_key(address) for address in exclude}
    result: list[links.Link] = []
    for link in candidates:
        if not any(keyword in link.text for keyword in keywords.SECONDARY_PAGE_KEYWORDS):
            continue
        if not url_mod.is_absolute_http_url(link.address):
            continue
        address = url_mod.page_key(link.address)
        if address in seen:
            continue
        seen.add(address)
        result.append(link)
    return result
