"""Pydantic models for candidate links and resolved compliance link sets."""

from __future__ import annotations

import enum

import pydantic


class LinkCategory(enum.StrEnum):
    """The three kinds of compliance document the pipeline looks for."""

    TERMS = "terms"
    PRIVACY = "privacy"
    COOKIE = "cookie"


class Link(pydantic.BaseModel):
    """An anchor read from a live page.

    ``address`` is the absolute URL reported by the browser engine
    (``a.href``), so relative hrefs are already resolved.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    text: str
    address: str
    in_footer: bool = False
    in_header: bool = False

    @pydantic.field_validator("text", mode="before")
    @classmethod
    def _normalise_text(cls, value: object) -> str:
        return " ".join(str(value or "").split()).lower()

    @pydantic.field_validator("address", mode="before")
    @classmethod
    def _normalise_address(cls, value: object) -> str:
        return str(value or "").strip()


class ComplianceLinkSet(pydantic.BaseModel):
    """At most one resolved link per compliance category."""

    terms_link: Link | None = None
    privacy_link: Link | None = None
    cookie_link: Link | None = None

    def get(self, category: LinkCategory) -> Link | None:
        """Return the link resolved for *category*, if any."""
        return getattr(self, f"{category.value}_link")

    def missing(self) -> list[LinkCategory]:
        """Categories that are still unresolved, in declaration order."""
        return [category for category in LinkCategory if self.get(category) is None]

    @property
    def is_complete(self) -> bool:
        """Whether all three categories are resolved."""
        return not self.missing()

    @property
    def addresses(self) -> set[str]:
        """Addresses of every resolved link."""
        return {link.address for link in (self.terms_link, self.privacy_link, self.cookie_link) if link}

    def merge(self, fallback: ComplianceLinkSet) -> ComplianceLinkSet:
        """Fill unresolved slots from *fallback* without overwriting any set slot."""
        return ComplianceLinkSet(
            terms_link=self.terms_link or fallback.terms_link,
            privacy_link=self.privacy_link or fallback.privacy_link,
            cookie_link=self.cookie_link or fallback.cookie_link,
        )
