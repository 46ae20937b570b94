"""Tests for compliance_scout.browser.session — browser lifecycle."""

from __future__ import annotations

import asyncio
from unittest import mock

import pytest

from compliance_scout.browser import session as session_mod


def _mock_playwright() -> tuple[mock.MagicMock, mock.MagicMock, mock.MagicMock]:
    context = mock.MagicMock()
    context.new_page = mock.AsyncMock(side_effect=lambda: mock.MagicMock(close=mock.AsyncMock()))
    context.close = mock.AsyncMock()
    browser = mock.MagicMock()
    browser.new_context = mock.AsyncMock(return_value=context)
    browser.close = mock.AsyncMock()
    pw = mock.MagicMock()
    pw.chromium.launch = mock.AsyncMock(return_value=browser)
    pw.stop = mock.AsyncMock()
    return pw, browser, context


def _patch_playwright(pw: mock.MagicMock):
    starter = mock.MagicMock()
    starter.start = mock.AsyncMock(return_value=pw)
    return mock.patch.object(session_mod.async_api, "async_playwright", return_value=starter)


class TestBrowserSession:
    def test_launch_and_close(self) -> None:
        pw, browser, context = _mock_playwright()
        session = session_mod.BrowserSession()

        async def run() -> None:
            await session.launch_browser()
            assert session.is_active
            page = await session.new_page()
            assert session.open_page_count == 1
            await session.close_page(page)
            assert session.open_page_count == 0
            await session.close()

        with _patch_playwright(pw):
            asyncio.run(run())

        launch_kwargs = pw.chromium.launch.await_args.kwargs
        assert launch_kwargs["headless"] is True
        assert "--no-sandbox" in launch_kwargs["args"]
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        pw.stop.assert_awaited_once()
        assert not session.is_active

    def test_launch_failure_cleans_up(self) -> None:
        pw, _, _ = _mock_playwright()
        pw.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")
        session = session_mod.BrowserSession()
        with _patch_playwright(pw), pytest.raises(RuntimeError):
            asyncio.run(session.launch_browser())
        pw.stop.assert_awaited_once()
        assert not session.is_active

    def test_new_page_requires_launch(self) -> None:
        with pytest.raises(RuntimeError, match="No browser session active"):
            asyncio.run(session_mod.BrowserSession().new_page())

    def test_page_close_errors_are_non_fatal(self) -> None:
        session = session_mod.BrowserSession()
        page = mock.MagicMock()
        page.close = mock.AsyncMock(side_effect=RuntimeError("already closed"))
        asyncio.run(session.close_page(page))
