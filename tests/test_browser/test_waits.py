"""Tests für den Element-Wait (Poll-Loop)."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from webpilot.browser.waits import DEFAULT_POLL_INTERVAL_MS, DEFAULT_TIMEOUT_MS, wait_for_element
from webpilot.core.errors import ElementNotFoundError


def _page(*results: object) -> MagicMock:
    page = MagicMock()
    page.query_selector = AsyncMock(side_effect=list(results))
    return page


class TestWaitForElement:
    def test_defaults(self) -> None:
        assert DEFAULT_TIMEOUT_MS == 10_000
        assert DEFAULT_POLL_INTERVAL_MS == 250

    @pytest.mark.asyncio
    async def test_immediate_hit(self) -> None:
        handle = MagicMock()
        page = _page(handle)
        result = await wait_for_element(page, "css=h1", timeout_ms=1000, poll_interval_ms=10)
        assert result is handle
        page.query_selector.assert_awaited_once_with("css=h1")

    @pytest.mark.asyncio
    async def test_appears_after_polls(self) -> None:
        handle = MagicMock()
        page = _page(None, None, handle)
        result = await wait_for_element(page, "css=#late", timeout_ms=2000, poll_interval_ms=10)
        assert result is handle
        assert page.query_selector.await_count == 3

    @pytest.mark.asyncio
    async def test_timeout_floor_and_bound(self) -> None:
        page = MagicMock()
        page.query_selector = AsyncMock(return_value=None)
        loop = asyncio.get_running_loop()

        started = loop.time()
        with pytest.raises(ElementNotFoundError) as exc_info:
            await wait_for_element(page, "css=#missing", timeout_ms=150, poll_interval_ms=20)
        elapsed = loop.time() - started

        assert elapsed >= 0.15
        assert elapsed < 1.5
        assert page.query_selector.await_count >= 2
        assert exc_info.value.details["selector"] == "css=#missing"
        assert exc_info.value.details["timeout_ms"] == 150

    @pytest.mark.asyncio
    async def test_zero_timeout_single_attempt(self) -> None:
        page = MagicMock()
        page.query_selector = AsyncMock(return_value=None)
        with pytest.raises(ElementNotFoundError):
            await wait_for_element(page, "css=#x", timeout_ms=0, poll_interval_ms=10)
        assert page.query_selector.await_count == 1

    @pytest.mark.asyncio
    async def test_driver_error_propagates(self) -> None:
        page = _page(RuntimeError("Target closed"))
        with pytest.raises(RuntimeError, match="Target closed"):
            await wait_for_element(page, "css=#x", timeout_ms=100, poll_interval_ms=10)
