"""Tests für die DriverFactory (Playwright gemockt)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from webpilot.browser.driver import MAXIMIZE_ARG, DriverFactory
from webpilot.browser.session import SessionManager
from webpilot.browser.types import BrowserKind
from webpilot.config import BrowserSettings
from webpilot.core.errors import ErrorKind, SessionLaunchError, UnsupportedBrowserError


def _make_playwright_factory() -> tuple[MagicMock, MagicMock]:
    """Gibt (playwright_factory, playwright) zurück."""
    page = MagicMock()
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.set_default_timeout = MagicMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.stop = AsyncMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.firefox.launch = AsyncMock(return_value=browser)

    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)
    return MagicMock(return_value=manager), playwright


def _make_factory(settings: BrowserSettings | None = None) -> tuple[DriverFactory, SessionManager, MagicMock]:
    pw_factory, playwright = _make_playwright_factory()
    sessions = SessionManager()
    factory = DriverFactory(settings or BrowserSettings(), sessions, playwright_factory=pw_factory)
    return factory, sessions, playwright


class TestLaunchPlan:
    @pytest.mark.asyncio
    async def test_chrome_maximized(self) -> None:
        factory, sessions, playwright = _make_factory()
        session = await factory.create_session("chrome")

        playwright.chromium.launch.assert_awaited_once_with(headless=False, args=[MAXIMIZE_ARG])
        session.browser.new_context.assert_awaited_once_with(no_viewport=True)
        assert session.kind is BrowserKind.CHROME
        assert sessions.get_active() is session

    @pytest.mark.asyncio
    async def test_edge_uses_msedge_channel(self) -> None:
        factory, _, playwright = _make_factory()
        await factory.create_session(BrowserKind.EDGE)
        playwright.chromium.launch.assert_awaited_once_with(
            headless=False, channel="msedge", args=[MAXIMIZE_ARG],
        )

    @pytest.mark.asyncio
    async def test_firefox_default_options(self) -> None:
        factory, _, playwright = _make_factory()
        session = await factory.create_session("firefox")
        playwright.firefox.launch.assert_awaited_once_with(headless=False)
        session.browser.new_context.assert_awaited_once_with()
        playwright.chromium.launch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_maximize_headless(self) -> None:
        factory, _, playwright = _make_factory(BrowserSettings(headless=True, maximize=False))
        session = await factory.create_session("chrome")
        playwright.chromium.launch.assert_awaited_once_with(headless=True)
        session.browser.new_context.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_action_timeout_applied(self) -> None:
        factory, _, _ = _make_factory(BrowserSettings(action_timeout_ms=5000))
        session = await factory.create_session("chrome")
        session.context.set_default_timeout.assert_called_once_with(5000)


class TestLaunchFailures:
    @pytest.mark.asyncio
    async def test_unsupported_browser(self) -> None:
        factory, sessions, playwright = _make_factory()
        with pytest.raises(UnsupportedBrowserError) as exc_info:
            await factory.create_session("safari")
        assert exc_info.value.kind is ErrorKind.UNSUPPORTED_BROWSER
        assert sessions.has_active is False
        playwright.chromium.launch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_launch_error_leaves_session_empty(self) -> None:
        factory, sessions, playwright = _make_factory()
        playwright.chromium.launch = AsyncMock(side_effect=RuntimeError("Executable doesn't exist"))

        with pytest.raises(SessionLaunchError) as exc_info:
            await factory.create_session("chrome")

        assert "Executable doesn't exist" in str(exc_info.value)
        assert exc_info.value.details == {"browser": "chrome"}
        assert sessions.has_active is False
        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_error_closes_browser(self) -> None:
        factory, sessions, playwright = _make_factory()
        browser = playwright.chromium.launch.return_value
        browser.new_context = AsyncMock(side_effect=RuntimeError("context failed"))

        with pytest.raises(SessionLaunchError):
            await factory.create_session("edge")

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert sessions.has_active is False
