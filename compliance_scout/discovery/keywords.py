"""Keyword and selector constants for compliance link discovery.

All keyword sets are English + French and matched by plain substring
containment against lowercased link text and addresses.
"""

from __future__ import annotations

from compliance_scout.models import links

TERMS_KEYWORDS: tuple[str, ...] = (
    "terms",
    "conditions",
    "tos",
    "mentions légales",
    "mentions-legales",
    "conditions générales",
    "cgu",
    "cgv",
    "legal",
)

PRIVACY_KEYWORDS: tuple[str, ...] = (
    "privacy",
    "vie privée",
    "données personnelles",
    "donnees-personnelles",
    "confidentialité",
    "confidentialite",
    "rgpd",
)

COOKIE_KEYWORDS: tuple[str, ...] = (
    "cookie",
    "traceurs",
)

CATEGORY_KEYWORDS: dict[links.LinkCategory, tuple[str, ...]] = {
    links.LinkCategory.TERMS: TERMS_KEYWORDS,
    links.LinkCategory.PRIVACY: PRIVACY_KEYWORDS,
    links.LinkCategory.COOKIE: COOKIE_KEYWORDS,
}

# Link text that suggests a secondary page ("about", "legal", "help")
# which may itself link to the compliance documents.
SECONDARY_PAGE_KEYWORDS: tuple[str, ...] = (
    "about",
    "à propos",
    "legal",
    "légal",
    "juridique",
    "aide",
    "help",
)

# Footer-like containers, tried in order; the first match wins.
FOOTER_SELECTORS: tuple[str, ...] = (
    "footer",
    ".footer",
    "#footer",
    '[role="contentinfo"]',
    ".bottom",
    ".site-info",
)

# Button/link text that accepts a consent dialog.
CONSENT_ACCEPT_KEYWORDS: tuple[str, ...] = (
    "accept",
    "agree",
    "continue",
    "accepter",
    "j'accepte",
    "tout accepter",
    "continuer",
    "d'accord",
)
