"""Session Manager -- hält höchstens eine aktive Browser-Session.

Die Session gehört dem Server (nicht einem Modul-Global): der Dispatcher
bekommt seinen SessionManager bei der Konstruktion. Jeder Tool-Aufruf
liest die Session über ``get_active()``; geschrieben wird nur von
open_browser (set_active), close_browser und dem Exit-Hook (clear).

``lock`` serialisiert Tool-Aufrufe gegen die gemeinsame Session, damit
sich parallel eintreffende Aufrufe nicht verschränken.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from typing import Any

from webpilot.browser.types import BrowserKind
from webpilot.core.errors import NoActiveSessionError
from webpilot.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class BrowserSession:
    """Eine lebende Verbindung zu einer Browser-Instanz."""

    kind: BrowserKind
    playwright: Any
    browser: Any
    context: Any
    page: Any
    started_at: float = field(default_factory=time.time)

    async def close(self) -> None:
        """Schließt Context, Browser und Playwright.

        Fehler beim Schließen von Context oder Browser werden ignoriert,
        damit Playwright in jedem Fall gestoppt wird. Ein Fehler von
        ``browser.close()`` wird danach weitergereicht.
        """
        with contextlib.suppress(Exception):
            await self.context.close()
        try:
            await self.browser.close()
        finally:
            await self.playwright.stop()
        log.info(
            "browser_session_closed",
            browser=self.kind.value,
            uptime_s=round(time.time() - self.started_at, 1),
        )


class SessionManager:
    """Single-Slot-Ownership für die aktive BrowserSession."""

    def __init__(self) -> None:
        self._active: BrowserSession | None = None
        self._lock = asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def has_active(self) -> bool:
        return self._active is not None

    def set_active(self, session: BrowserSession) -> None:
        """Ersetzt die aktive Session bedingungslos."""
        if self._active is not None and self._active is not session:
            log.warning(
                "browser_session_replaced",
                previous=self._active.kind.value,
                new=session.kind.value,
            )
        self._active = session
        log.debug("browser_session_activated", browser=session.kind.value)

    def get_active(self) -> BrowserSession:
        """Gibt die aktive Session zurück.

        Raises:
            NoActiveSessionError: Es wurde noch kein Browser geöffnet.
        """
        if self._active is None:
            raise NoActiveSessionError()
        return self._active

    def clear(self) -> BrowserSession | None:
        """Setzt den Slot zurück und gibt die bisherige Session zurück."""
        previous, self._active = self._active, None
        return previous
