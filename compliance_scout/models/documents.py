"""Pydantic models for extraction requests and extracted documents.

Extraction outcomes use a tagged result (``found`` / ``not-found`` /
``failed``) so callers can tell "the site has no such document" apart
from "extraction failed". ``DocumentResult.as_text`` renders the plain
string form used by the HTTP response.
"""

from __future__ import annotations

import enum
from typing import Literal

import pydantic

from compliance_scout.models import links


def _camel_alias(field_name: str) -> str:
    """API payloads use camelCase keys: ``source_url`` → ``sourceUrl``."""
    head, *rest = field_name.split("_")
    return head + "".join(part.title() for part in rest)


class DocumentType(enum.StrEnum):
    """What an extraction call is asked to return."""

    TERMS = "terms"
    PRIVACY = "privacy"
    COOKIE = "cookie"
    COMBINED = "combined"

    @property
    def label(self) -> str:
        """Human-readable name used in prompts and messages."""
        return _LABELS[self]

    @classmethod
    def for_category(cls, category: links.LinkCategory) -> DocumentType:
        """Map a link category to the matching single-document type."""
        return cls(category.value)


_LABELS = {
    DocumentType.TERMS: "terms of service",
    DocumentType.PRIVACY: "privacy policy",
    DocumentType.COOKIE: "cookie policy",
    DocumentType.COMBINED: "privacy and cookie policies",
}

DocumentStatus = Literal["found", "not-found", "failed"]


class ExtractionRequest(pydantic.BaseModel):
    """One call to the text-extraction service.

    ``source_text`` has already been size-capped by the content extractor.
    """

    document_type: DocumentType
    source_text: str
    retry_budget: int = pydantic.Field(default=3, ge=1)
    max_tokens: int = 2500


class DocumentResult(pydantic.BaseModel):
    """Outcome of extracting one compliance document."""

    model_config = pydantic.ConfigDict(alias_generator=_camel_alias, populate_by_name=True)

    document_type: DocumentType
    status: DocumentStatus
    text: str | None = None
    reason: str | None = None
    source_url: str | None = None
    derived: bool = False

    @classmethod
    def found(
        cls,
        document_type: DocumentType,
        text: str,
        source_url: str | None = None,
        *,
        derived: bool = False,
    ) -> DocumentResult:
        """Return a result carrying extracted document text."""
        return cls(
            document_type=document_type,
            status="found",
            text=text.strip(),
            source_url=source_url,
            derived=derived,
        )

    @classmethod
    def not_found(cls, document_type: DocumentType, source_url: str | None = None) -> DocumentResult:
        """Return a result for a page that holds no such document."""
        return cls(document_type=document_type, status="not-found", source_url=source_url)

    @classmethod
    def failed(cls, document_type: DocumentType, reason: str, source_url: str | None = None) -> DocumentResult:
        """Return a result for an extraction that could not complete."""
        return cls(document_type=document_type, status="failed", reason=reason, source_url=source_url)

    @property
    def is_found(self) -> bool:
        return self.status == "found"

    def as_text(self) -> str:
        """Render the result as the single string shown to API callers."""
        label = self.document_type.label
        if self.status == "found":
            return self.text or ""
        if self.status == "not-found":
            return f"No {label} found on this page."
        where = f" from {self.source_url}" if self.source_url else ""
        return f"Failed to extract {label}{where}: {self.reason}"


class ScrapingResult(pydantic.BaseModel):
    """Pipeline output. ``None`` means no link was found for that document."""

    model_config = pydantic.ConfigDict(alias_generator=_camel_alias, populate_by_name=True)

    terms_of_service: DocumentResult | None = None
    privacy_policy: DocumentResult | None = None
    cookie_policy: DocumentResult | None = None

    def as_texts(self) -> dict[str, str | None]:
        """Return the three optional document strings keyed in camelCase."""
        return {
            "termsOfService": self.terms_of_service.as_text() if self.terms_of_service else None,
            "privacyPolicy": self.privacy_policy.as_text() if self.privacy_policy else None,
            "cookiePolicy": self.cookie_policy.as_text() if self.cookie_policy else None,
        }
