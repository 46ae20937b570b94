"""JSON helpers for extraction service replies."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def load_json_from_text(text: str | None) -> Any:
    """Strip markdown code fences and parse JSON.

    Models sometimes answer a plain-text prompt with a fenced JSON
    object instead of the requested markers.

    Returns:
        The parsed value, or ``None`` if *text* is not JSON.
    """
    content = (text or "").strip()
    if content.startswith("```"):
        content = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", content)).strip()
    if not content.startswith(("{", "[")):
        return None
    try:
        return json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return None


def first_text_field(data: Any, keys: Iterable[str]) -> str | None:
    """Return the first non-blank string value in *data* under any of *keys*.

    Keys are compared case-insensitively, ignoring spaces, underscores
    and hyphens, so ``privacyPolicy`` matches ``privacy_policy``.
    """
    if not isinstance(data, dict):
        return None
    wanted = [_normalise_key(key) for key in keys]
    normalised = {_normalise_key(str(key)): value for key, value in data.items()}
    for key in wanted:
        value = normalised.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _normalise_key(key: str) -> str:
    return re.sub(r"[\s_\-]", "", key).lower()
