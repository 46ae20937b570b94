"""DOM queries evaluated inside the page.

This is the closed set of scripts the pipeline sends across the
Playwright boundary. Each takes JSON-serialisable arguments and returns
plain JSON; callers parse the results into typed models.
"""

from __future__ import annotations

# () -> [{text, address, inFooter, inHeader}]
# ``a.href`` is the absolute URL resolved by the browser engine.
LIST_ANCHORS = """() => Array.from(document.querySelectorAll('a[href]')).map(a => ({
    text: (a.textContent || '').trim().toLowerCase(),
    address: a.href,
    inFooter: a.closest('footer') !== null,
    inHeader: a.closest('header') !== null,
}))"""

# (selectors: string[]) -> [{text, address, inFooter, inHeader}]
# Anchors inside the first container matching any selector, in order.
LIST_ANCHORS_WITHIN = """(selectors) => {
    let container = null;
    for (const selector of selectors) {
        try {
            container = document.querySelector(selector);
        } catch (e) {
            container = null;
        }
        if (container) break;
    }
    if (!container) return [];
    return Array.from(container.querySelectorAll('a[href]')).map(a => ({
        text: (a.textContent || '').trim().toLowerCase(),
        address: a.href,
        inFooter: true,
        inHeader: a.closest('header') !== null,
    }));
}"""

# (keywords: string[]) -> clicked element text | null
# Buttons are preferred over links so a "continue reading" anchor is
# only clicked when no consent button exists.
DISMISS_CONSENT = """(keywords) => {
    const matchesKeyword = (el) => {
        const text = (el.textContent || '').trim().toLowerCase();
        return text.length > 0 && text.length < 60 && keywords.some(k => text.includes(k));
    };
    const buttons = Array.from(document.querySelectorAll('button, [role="button"]'));
    const anchors = Array.from(document.querySelectorAll('a'));
    const target = buttons.find(matchesKeyword) || anchors.find(matchesKeyword);
    if (!target) return null;
    target.click();
    return (target.textContent || '').trim().slice(0, 80);
}"""
