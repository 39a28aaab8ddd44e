"""
webpilot · Shared Test-Fixtures.

Playwright wird nie gestartet: Pages, Elemente und die DriverFactory
sind Mocks. Element-Waits laufen mit kurzen Timeouts, damit Tests für
fehlende Elemente schnell bleiben.
"""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from webpilot.browser.session import BrowserSession, SessionManager
from webpilot.browser.types import BrowserKind
from webpilot.config import WaitSettings, WebpilotConfig
from webpilot.mcp.server import WebpilotMCPServer
from webpilot.mcp.tools import BrowserToolset, register_browser_tools

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


def _make_element(text: str = "") -> MagicMock:
    element = MagicMock()
    for name in ("click", "focus", "hover", "dblclick", "select_option", "set_input_files"):
        setattr(element, name, AsyncMock())
    element.inner_text = AsyncMock(return_value=text)
    return element


def _make_echo_element(page: Any) -> MagicMock:
    """Element, dessen Text alles enthält, was über ``page.keyboard`` getippt wurde."""
    element = _make_element()
    typed: list[str] = []
    page.keyboard.type = AsyncMock(side_effect=lambda text: typed.append(text))
    element.inner_text = AsyncMock(side_effect=lambda: "".join(typed))
    return element


def _make_page(elements: dict[str, Any] | None = None, title: str = "Example Domain") -> MagicMock:
    """Page-Mock. ``elements`` bildet Playwright-Selektoren auf Element-Mocks ab."""
    registry: dict[str, Any] = {} if elements is None else elements
    page = MagicMock()
    page.elements = registry
    page.query_selector = AsyncMock(side_effect=lambda selector: registry.get(selector))
    page.goto = AsyncMock()
    page.title = AsyncMock(return_value=title)
    page.screenshot = AsyncMock(return_value=PNG_BYTES)
    page.keyboard.down = AsyncMock()
    page.keyboard.type = AsyncMock()
    page.keyboard.up = AsyncMock()
    page.mouse.down = AsyncMock()
    page.mouse.up = AsyncMock()
    return page


def _make_session(kind: BrowserKind | str, page: Any) -> BrowserSession:
    playwright = MagicMock()
    playwright.stop = AsyncMock()
    browser = MagicMock()
    browser.close = AsyncMock()
    context = MagicMock()
    context.close = AsyncMock()
    return BrowserSession(
        kind=BrowserKind(kind),
        playwright=playwright,
        browser=browser,
        context=context,
        page=page,
    )


class FakeDriverFactory:
    """Ersetzt DriverFactory: registriert eine Mock-Session statt einen Browser zu starten."""

    def __init__(self, sessions: SessionManager, page: Any) -> None:
        self.sessions = sessions
        self.page = page
        self.launched: list[BrowserKind] = []
        self.error: Exception | None = None

    async def create_session(self, kind: BrowserKind | str) -> BrowserSession:
        if self.error is not None:
            raise self.error
        session = _make_session(kind, self.page)
        self.launched.append(session.kind)
        self.sessions.set_active(session)
        return session


@pytest.fixture
def make_element() -> Callable[..., MagicMock]:
    return _make_element


@pytest.fixture
def make_echo_element() -> Callable[[Any], MagicMock]:
    return _make_echo_element


@pytest.fixture
def make_page() -> Callable[..., MagicMock]:
    return _make_page


@pytest.fixture
def make_session() -> Callable[[BrowserKind | str, Any], BrowserSession]:
    return _make_session


@pytest.fixture
def make_factory() -> type[FakeDriverFactory]:
    return FakeDriverFactory


@pytest.fixture
def config() -> WebpilotConfig:
    """WebpilotConfig mit kurzen Element-Waits."""
    return WebpilotConfig(waits=WaitSettings(element_timeout_ms=200, poll_interval_ms=20))


@pytest.fixture
def sessions() -> SessionManager:
    return SessionManager()


@pytest.fixture
def page() -> MagicMock:
    return _make_page()


@pytest.fixture
def factory(sessions: SessionManager, page: MagicMock) -> FakeDriverFactory:
    return FakeDriverFactory(sessions, page)


@pytest.fixture
def toolset(
    config: WebpilotConfig,
    sessions: SessionManager,
    factory: FakeDriverFactory,
) -> BrowserToolset:
    return BrowserToolset(config, sessions=sessions, factory=factory)  # type: ignore[arg-type]


@pytest.fixture
def active_session(sessions: SessionManager, page: MagicMock) -> BrowserSession:
    """Eine bereits geöffnete Chrome-Session auf ``page``."""
    session = _make_session(BrowserKind.CHROME, page)
    sessions.set_active(session)
    return session


@pytest.fixture
def server(config: WebpilotConfig, toolset: BrowserToolset) -> WebpilotMCPServer:
    """MCP-Server mit allen Browser-Tools, ohne echten Browser."""
    srv = WebpilotMCPServer(config.server)
    register_browser_tools(srv, toolset)
    return srv
