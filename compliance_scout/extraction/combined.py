"""
Combined privacy + cookie extraction for pages that hold both policies.

One extraction call returns both documents under ``PRIVACY POLICY:``
and ``COOKIE POLICY:`` markers. If the cookie half comes back empty, a
narrower follow-up call pulls only the cookie sections out of the
privacy text.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from compliance_scout.extraction import content, extractor, prompts
from compliance_scout.models import documents
from compliance_scout.utils import errors, json_parsing, logger

log = logger.create_logger("Combined")

_PRIVACY_KEYS = ("privacyPolicy", "privacy")
_COOKIE_KEYS = ("cookiePolicy", "cookie")


class SplitResponse(NamedTuple):
    """Raw policy texts parsed out of one combined reply."""

    privacy: str | None
    cookie: str | None


def _find_marker(text: str, marker: str) -> tuple[int, int] | None:
    """Locate *marker*, preferring an occurrence at the start of a line.

    Falls back to the first raw occurrence so a reply that puts the
    marker mid-line still splits.
    """
    match = re.search(rf"^[ \t]*{re.escape(marker)}", text, re.MULTILINE)
    if match is not None:
        return match.end() - len(marker), match.end()
    start = text.find(marker)
    if start == -1:
        return None
    return start, start + len(marker)


def _clean(section: str) -> str | None:
    section = section.strip()
    return section or None


def split_combined_response(reply: str) -> SplitResponse:
    """Split a combined reply into privacy and cookie text.

    A JSON object reply is read first. Otherwise the markers are used
    in whichever order they appear: text between the first and second
    marker belongs to the first, text after the second to the second.
    A missing marker leaves that document as ``None``.
    """
    data = json_parsing.load_json_from_text(reply)
    if isinstance(data, dict):
        privacy = json_parsing.first_text_field(data, _PRIVACY_KEYS)
        cookie = json_parsing.first_text_field(data, _COOKIE_KEYS)
        if privacy is not None or cookie is not None:
            return SplitResponse(privacy, cookie)

    privacy_at = _find_marker(reply, prompts.PRIVACY_MARKER)
    cookie_at = _find_marker(reply, prompts.COOKIE_MARKER)

    if privacy_at and cookie_at:
        if privacy_at[0] < cookie_at[0]:
            return SplitResponse(
                _clean(reply[privacy_at[1] : cookie_at[0]]),
                _clean(reply[cookie_at[1] :]),
            )
        return SplitResponse(
            _clean(reply[privacy_at[1] :]),
            _clean(reply[cookie_at[1] : privacy_at[0]]),
        )
    if privacy_at:
        return SplitResponse(_clean(reply[privacy_at[1] :]), None)
    if cookie_at:
        return SplitResponse(None, _clean(reply[cookie_at[1] :]))
    return SplitResponse(None, None)


def _is_missing_cookie_text(text: str | None) -> bool:
    if text is None:
        return True
    lowered = text.lower()
    return any(
        sentinel.lower() in lowered
        for sentinel in (prompts.NO_DEDICATED_COOKIE_POLICY, prompts.NO_COOKIE_POLICY)
    )


def _to_result(
    document_type: documents.DocumentType,
    text: str | None,
    source_url: str | None,
) -> documents.DocumentResult:
    if text is None or extractor.is_not_found_reply(text, document_type):
        return documents.DocumentResult.not_found(document_type, source_url)
    return documents.DocumentResult.found(document_type, text, source_url)


class CombinedPolicySplitter:
    """Extracts privacy and cookie policies that live on the same page."""

    def __init__(self, document_extractor: extractor.DocumentExtractor) -> None:
        self._extractor = document_extractor

    async def extract(
        self,
        text: str,
        source_url: str | None = None,
    ) -> tuple[documents.DocumentResult, documents.DocumentResult]:
        """Return ``(privacy, cookie)`` results for one combined page."""
        log.info("Extracting combined privacy and cookie policies", {"url": source_url, "chars": len(text)})
        try:
            reply = await self._extractor.complete(
                prompts.COMBINED_SYSTEM_PROMPT,
                prompts.combined_user_prompt(text),
                max_tokens=extractor.COMBINED_MAX_TOKENS,
                retry_budget=extractor.COMBINED_ATTEMPTS,
                context=documents.DocumentType.COMBINED.label,
            )
        except Exception as exc:
            reason = errors.get_error_message(exc)
            log.error("Combined extraction failed", {"url": source_url, "error": reason})
            return (
                documents.DocumentResult.failed(documents.DocumentType.PRIVACY, reason, source_url),
                documents.DocumentResult.failed(documents.DocumentType.COOKIE, reason, source_url),
            )

        log.debug("Combined reply", {"preview": content.content_preview(reply, 200)})
        split = split_combined_response(reply)
        privacy = _to_result(documents.DocumentType.PRIVACY, split.privacy, source_url)
        cookie_text = None if _is_missing_cookie_text(split.cookie) else split.cookie
        cookie = _to_result(documents.DocumentType.COOKIE, cookie_text, source_url)

        if not cookie.is_found and privacy.is_found and privacy.text:
            log.info("No dedicated cookie policy in combined reply, extracting cookie sections")
            followup = await self._extractor.extract_cookie_sections(
                privacy.text,
                source_url=source_url,
                char_limit=prompts.COMBINED_COOKIE_FOLLOWUP_CHAR_LIMIT,
                retry_budget=extractor.COMBINED_COOKIE_FOLLOWUP_ATTEMPTS,
            )
            if followup.status == "failed":
                log.warn("Cookie section follow-up failed", {"url": source_url, "reason": followup.reason})
            if followup.status != "not-found":
                cookie = followup

        log.info(
            "Combined extraction complete",
            {"privacy": privacy.status, "cookie": cookie.status, "privacyChars": len(privacy.text or "")},
        )
        return privacy, cookie
