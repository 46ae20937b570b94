"""Navigation policy and model-selection strategy models."""

from __future__ import annotations

import enum
from typing import Literal

import pydantic

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]


class NavigationPolicy(enum.StrEnum):
    """How patiently a page load waits.

    ``fast`` returns once the DOM is parsed; ``patient`` waits for the
    network to go quiet, for pages that render their content client-side.
    """

    FAST = "fast"
    PATIENT = "patient"

    @property
    def wait_until(self) -> WaitUntil:
        return "domcontentloaded" if self is NavigationPolicy.FAST else "networkidle"

    @property
    def timeout_ms(self) -> int:
        return 15_000 if self is NavigationPolicy.FAST else 60_000

    def other(self) -> NavigationPolicy:
        """Return the alternative policy to retry a failed load with."""
        return NavigationPolicy.PATIENT if self is NavigationPolicy.FAST else NavigationPolicy.FAST


class ModelStrategy(pydantic.BaseModel):
    """Primary model plus an optional cheaper/faster fallback."""

    model_config = pydantic.ConfigDict(frozen=True)

    primary_model: str
    fallback_model: str | None = None
    primary_timeout_s: float = 60.0
    fallback_timeout_s: float = 30.0

    def candidates(self) -> list[tuple[str, float]]:
        """Ordered ``(model, timeout)`` pairs to try."""
        pairs = [(self.primary_model, self.primary_timeout_s)]
        if self.fallback_model and self.fallback_model != self.primary_model:
            pairs.append((self.fallback_model, self.fallback_timeout_s))
        return pairs
