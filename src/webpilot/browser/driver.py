"""Driver Factory -- startet Browser-Sessions über Playwright.

Startoptionen pro Browser:
  - chrome:  Chromium mit --start-maximized, Viewport = Fenstergröße
  - firefox: Standard-Optionen (Firefox kennt das Chromium-Flag nicht)
  - edge:    Chromium-Startpfad mit channel="msedge" und --start-maximized

Eine erfolgreich gestartete Session wird beim SessionManager registriert.
Schlägt der Start fehl, wird Playwright wieder gestoppt und der
SessionManager bleibt unverändert.

Benötigt: pip install playwright && playwright install chromium firefox
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any, Callable

from playwright.async_api import async_playwright

from webpilot.browser.session import BrowserSession, SessionManager
from webpilot.browser.types import BrowserKind
from webpilot.core.errors import SessionLaunchError, UnsupportedBrowserError
from webpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from webpilot.config import BrowserSettings

log = get_logger(__name__)

MAXIMIZE_ARG = "--start-maximized"


class DriverFactory:
    """Startet Browser-Sessions und registriert sie beim SessionManager."""

    def __init__(
        self,
        settings: BrowserSettings,
        sessions: SessionManager,
        *,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self._settings = settings
        self._sessions = sessions
        self._playwright_factory = playwright_factory

    def _launch_plan(self, kind: BrowserKind) -> tuple[str, dict[str, Any], dict[str, Any]]:
        """Gibt (Engine, Launch-Optionen, Context-Optionen) für einen Browser zurück."""
        launch_opts: dict[str, Any] = {"headless": self._settings.headless}
        context_opts: dict[str, Any] = {}
        maximize = self._settings.maximize

        if kind is BrowserKind.CHROME:
            if maximize:
                launch_opts["args"] = [MAXIMIZE_ARG]
                context_opts["no_viewport"] = True
            return "chromium", launch_opts, context_opts

        if kind is BrowserKind.EDGE:
            launch_opts["channel"] = self._settings.edge_channel
            if maximize:
                launch_opts["args"] = [MAXIMIZE_ARG]
                context_opts["no_viewport"] = True
            return "chromium", launch_opts, context_opts

        if kind is BrowserKind.FIREFOX:
            return "firefox", launch_opts, context_opts

        raise UnsupportedBrowserError(str(kind))

    async def create_session(self, kind: BrowserKind | str) -> BrowserSession:
        """Startet einen Browser und macht ihn zur aktiven Session.

        Raises:
            UnsupportedBrowserError: kind ist nicht chrome, firefox oder edge.
            SessionLaunchError: Browser oder Driver konnte nicht starten.
        """
        try:
            browser_kind = BrowserKind(kind)
        except ValueError:
            raise UnsupportedBrowserError(str(kind)) from None

        engine, launch_opts, context_opts = self._launch_plan(browser_kind)

        playwright: Any = None
        browser: Any = None
        try:
            playwright = await self._playwright_factory().start()
            browser = await getattr(playwright, engine).launch(**launch_opts)
            context = await browser.new_context(**context_opts)
            context.set_default_timeout(self._settings.action_timeout_ms)
            page = await context.new_page()
        except Exception as exc:
            log.error(
                "browser_launch_failed",
                browser=browser_kind.value,
                error=str(exc),
                exc_type=type(exc).__name__,
            )
            with contextlib.suppress(Exception):
                if browser is not None:
                    await browser.close()
            with contextlib.suppress(Exception):
                if playwright is not None:
                    await playwright.stop()
            raise SessionLaunchError(
                f"Failed to start {browser_kind.value}: {exc}",
                details={"browser": browser_kind.value},
            ) from exc

        session = BrowserSession(
            kind=browser_kind,
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
        )
        self._sessions.set_active(session)
        log.info(
            "browser_session_started",
            browser=browser_kind.value,
            headless=self._settings.headless,
            engine=engine,
        )
        return session
