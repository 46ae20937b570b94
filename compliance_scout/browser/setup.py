"""
One-time browser runtime check, run at process start.

Looks for an installed Playwright browser cache and, if none is found,
installs Chromium once. The resulting ``BrowserRuntime`` handle is
passed into each pipeline run instead of being re-checked per request.
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
import pathlib
import sys

from compliance_scout.utils import logger

log = logger.create_logger("BrowserSetup")

INSTALL_TIMEOUT_S = 300.0


@dataclasses.dataclass(frozen=True)
class BrowserRuntime:
    """Result of the start-up browser check.

    Attributes:
        ready: A browser cache was found or installed.
        browsers_path: Directory holding the Playwright browsers, if known.
        detail: Human-readable note for logs and the health endpoint.
    """

    ready: bool
    browsers_path: str | None = None
    detail: str = ""


def candidate_cache_dirs() -> list[pathlib.Path]:
    """Return the directories Playwright installs browsers into."""
    candidates: list[pathlib.Path] = []
    env_path = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    if env_path and env_path != "0":
        candidates.append(pathlib.Path(env_path))
    home = pathlib.Path.home()
    candidates.extend(
        [
            home / ".cache" / "ms-playwright",
            home / "Library" / "Caches" / "ms-playwright",
            home / "AppData" / "Local" / "ms-playwright",
        ]
    )
    return candidates


def find_browser_cache(candidates: list[pathlib.Path] | None = None) -> pathlib.Path | None:
    """Return the first existing browser cache directory."""
    for path in candidates if candidates is not None else candidate_cache_dirs():
        if path.is_dir():
            return path
    return None


async def _install_chromium() -> tuple[bool, str]:
    """Run ``python -m playwright install chromium``."""
    log.info("Playwright browsers not found, installing Chromium (one-time setup)")
    proc = await asyncio.create_subprocess_exec(
        sys.executable,
        "-m",
        "playwright",
        "install",
        "chromium",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        output, _ = await asyncio.wait_for(proc.communicate(), timeout=INSTALL_TIMEOUT_S)
    except TimeoutError:
        proc.kill()
        return False, "Chromium install timed out"
    if proc.returncode != 0:
        return False, output.decode(errors="replace")[-500:]
    return True, "Chromium installed"


async def ensure_browser_runtime(*, install: bool = True) -> BrowserRuntime:
    """Check (and optionally install) the browser runtime once.

    Args:
        install: Install Chromium when no browser cache exists.

    Returns:
        A :class:`BrowserRuntime` describing the outcome. Install failures
        are reported on the handle, not raised.
    """
    cache = find_browser_cache()
    if cache is not None:
        log.info("Playwright browsers already installed", {"path": str(cache)})
        return BrowserRuntime(ready=True, browsers_path=str(cache), detail="Browser cache found")

    if not install:
        log.warn("Playwright browsers not found and install disabled")
        return BrowserRuntime(ready=False, detail="Browser cache not found")

    try:
        ok, detail = await _install_chromium()
    except OSError as exc:
        ok, detail = False, str(exc)

    if ok:
        cache = find_browser_cache()
        log.success("Playwright Chromium installed", {"path": str(cache) if cache else None})
        return BrowserRuntime(ready=True, browsers_path=str(cache) if cache else None, detail=detail)

    log.error("Playwright Chromium install failed", {"detail": detail})
    return BrowserRuntime(ready=False, detail=detail)
