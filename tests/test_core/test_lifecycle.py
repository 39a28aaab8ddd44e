"""Tests für die Lifecycle-Hooks beim Prozessende."""

from __future__ import annotations

import signal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from webpilot.browser.session import SessionManager
from webpilot.lifecycle import (
    SHUTDOWN_SIGNALS,
    close_active_session,
    install_signal_handlers,
    remove_signal_handlers,
)


class TestCloseActiveSession:
    @pytest.mark.asyncio
    async def test_no_session_is_swallowed(self) -> None:
        assert await close_active_session(SessionManager()) is False

    @pytest.mark.asyncio
    async def test_closes_and_clears(self, make_session: Any) -> None:
        sessions = SessionManager()
        session = make_session("chrome", MagicMock())
        sessions.set_active(session)

        assert await close_active_session(sessions) is True
        assert sessions.has_active is False
        session.playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_error_is_swallowed(self, make_session: Any) -> None:
        sessions = SessionManager()
        session = make_session("edge", MagicMock())
        session.browser.close = AsyncMock(side_effect=RuntimeError("browser gone"))
        sessions.set_active(session)

        assert await close_active_session(sessions) is False
        assert sessions.has_active is False


class TestSignalHandlers:
    def test_signals(self) -> None:
        assert SHUTDOWN_SIGNALS == (signal.SIGINT, signal.SIGTERM)

    def test_install_and_remove(self) -> None:
        loop = MagicMock()
        callback = MagicMock()

        installed = install_signal_handlers(loop, callback)

        assert installed == [signal.SIGINT, signal.SIGTERM]
        loop.add_signal_handler.assert_any_call(signal.SIGTERM, callback, signal.SIGTERM)
        remove_signal_handlers(loop, installed)
        assert loop.remove_signal_handler.call_count == 2

    def test_unsupported_platform(self) -> None:
        loop = MagicMock()
        loop.add_signal_handler.side_effect = NotImplementedError
        assert install_signal_handlers(loop, MagicMock()) == []
