"""Browser-Tools: Web-Automatisierung via Playwright als MCP-Tools.

Ermöglicht einem externen Agenten, eine Browser-Session Schritt für
Schritt zu steuern: öffnen, navigieren, Elemente finden, klicken,
tippen, ziehen, Screenshots erstellen, schließen.

Jeder Handler
  - holt die aktive Session (nur open_browser erzeugt eine),
  - wartet bei Element-Tools per Poll-Loop auf das Element (Default 10 s),
  - fängt jeden Fehler ab und liefert einen ToolResult-Umschlag mit
    ``success=false`` und ``errorKind``. Nichts propagiert bis zum Transport.

Aufrufe gegen die Session laufen unter ``SessionManager.lock`` und
damit strikt nacheinander.

MCP-Tool-Registrierung:
  - open_browser, close_browser
  - navigate_to_url, verify_page_title, take_screenshot, press_key
  - find_element, click_element, send_keys, get_element_text,
    verify_element_text, select_dropdown_option, mouse_hover,
    double_click, right_click, upload_file, drag_and_drop
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

from webpilot.browser.driver import DriverFactory
from webpilot.browser.keys import normalize_key
from webpilot.browser.locators import selector_for
from webpilot.browser.session import BrowserSession, SessionManager
from webpilot.browser.waits import wait_for_element
from webpilot.core.errors import DriverOperationError, SessionAlreadyActiveError, error_kind_of
from webpilot.mcp.models import (
    DragAndDropInput,
    ElementTextResult,
    EmptyInput,
    LocatorInput,
    NavigateInput,
    NavigateResult,
    OpenBrowserInput,
    OpenBrowserResult,
    PressKeyInput,
    ScreenshotResult,
    SelectDropdownInput,
    SendKeysInput,
    ToolResult,
    UploadFileInput,
    VerifyElementTextInput,
    VerifyElementTextResult,
    VerifyPageTitleInput,
    VerifyPageTitleResult,
)
from webpilot.mcp.server import MCPToolDef, ToolAnnotationKey
from webpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from webpilot.browser.types import Locator
    from webpilot.config import WebpilotConfig
    from webpilot.mcp.server import WebpilotMCPServer

log = get_logger(__name__)

R = TypeVar("R", bound=ToolResult)

__all__ = [
    "BROWSER_TOOL_SPECS",
    "BrowserToolset",
    "register_browser_tools",
]


class BrowserToolset:
    """Handler-Sammlung für alle Browser-Tools.

    Besitzt den SessionManager und die DriverFactory. Der Server hält
    genau ein Toolset und damit genau eine Session.
    """

    def __init__(
        self,
        config: WebpilotConfig,
        sessions: SessionManager | None = None,
        factory: DriverFactory | None = None,
    ) -> None:
        self._config = config
        self._sessions = sessions or SessionManager()
        self._factory = factory or DriverFactory(config.browser, self._sessions)

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    # ── Helpers ──────────────────────────────────────────────────

    async def _locate(self, session: BrowserSession, locator: Locator) -> Any:
        """Löst den Locator auf und wartet, bis das Element existiert."""
        return await wait_for_element(
            session.page,
            selector_for(locator),
            timeout_ms=self._config.waits.element_timeout_ms,
            poll_interval_ms=self._config.waits.poll_interval_ms,
        )

    async def _run(
        self,
        action: str,
        op: Callable[[BrowserSession], Awaitable[R]],
        result_cls: type[R],
        **failure_fields: Any,
    ) -> R:
        """Führt eine Operation gegen die aktive Session aus und konvertiert Fehler."""
        try:
            async with self._sessions.lock:
                session = self._sessions.get_active()
                return await op(session)
        except Exception as exc:
            log.warning(
                "browser_tool_failed",
                action=action,
                error_kind=error_kind_of(exc).value,
                error=str(exc),
            )
            return result_cls.failure(exc, **failure_fields)

    async def _close_session(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception as exc:
            raise DriverOperationError(f"Failed to close browser: {exc}") from exc

    # ── Session ──────────────────────────────────────────────────

    async def open_browser(self, params: OpenBrowserInput) -> OpenBrowserResult:
        browser = params.browser
        try:
            async with self._sessions.lock:
                if self._sessions.has_active:
                    active = self._sessions.get_active()
                    if self._config.session.on_open_when_active == "reject":
                        raise SessionAlreadyActiveError(active.kind.value)
                    self._sessions.clear()
                    log.info("browser_session_replacing", previous=active.kind.value)
                    try:
                        await active.close()
                    except Exception as exc:
                        log.warning("browser_session_close_failed", error=str(exc))
                await self._factory.create_session(browser)
        except Exception as exc:
            log.warning("open_browser_failed", browser=browser.value, error=str(exc))
            return OpenBrowserResult.failure(exc, browser=browser)

        message = f"Browser '{browser.value}' started successfully"
        return OpenBrowserResult(success=True, browser=browser, message=message)

    async def close_browser(self, params: EmptyInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            # Slot wird in jedem Fall geleert, auch wenn close() scheitert
            self._sessions.clear()
            await self._close_session(session)
            return ToolResult(success=True, message="Browser closed successfully.")

        return await self._run("close_browser", op, ToolResult)

    # ── Page ─────────────────────────────────────────────────────

    async def navigate_to_url(self, params: NavigateInput) -> NavigateResult:
        async def op(session: BrowserSession) -> NavigateResult:
            await session.page.goto(params.url)
            return NavigateResult(success=True, url=params.url, message=f"Navigated to URL: {params.url}")

        return await self._run("navigate_to_url", op, NavigateResult, url=params.url)

    async def verify_page_title(self, params: VerifyPageTitleInput) -> VerifyPageTitleResult:
        async def op(session: BrowserSession) -> VerifyPageTitleResult:
            actual = await session.page.title()
            if actual == params.expected_title:
                return VerifyPageTitleResult(
                    success=True, actual_title=actual, message=f"Page title matches: '{actual}'",
                )
            return VerifyPageTitleResult(
                success=False,
                actual_title=actual,
                message=f"Page title mismatch: expected '{params.expected_title}', got '{actual}'",
            )

        return await self._run("verify_page_title", op, VerifyPageTitleResult)

    async def take_screenshot(self, params: EmptyInput) -> ScreenshotResult:
        async def op(session: BrowserSession) -> ScreenshotResult:
            png = await session.page.screenshot(type="png")
            encoded = base64.b64encode(png).decode("ascii")
            log.info("browser_screenshot", size_bytes=len(png))
            return ScreenshotResult(success=True, screenshot=encoded, message="Screenshot captured.")

        return await self._run("take_screenshot", op, ScreenshotResult)

    async def press_key(self, params: PressKeyInput) -> ToolResult:
        key = normalize_key(params.key)

        async def op(session: BrowserSession) -> ToolResult:
            await session.page.keyboard.down(key)
            await session.page.keyboard.up(key)
            return ToolResult(success=True, message=f"Key '{key}' pressed")

        return await self._run("press_key", op, ToolResult)

    # ── Elements ─────────────────────────────────────────────────

    async def find_element(self, params: LocatorInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            await self._locate(session, params.locator)
            return ToolResult(success=True, message=f"Element found using {params.locator}")

        return await self._run("find_element", op, ToolResult)

    async def click_element(self, params: LocatorInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            await element.click()
            return ToolResult(success=True, message=f"Element clicked using {params.locator}")

        return await self._run("click_element", op, ToolResult)

    async def send_keys(self, params: SendKeysInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            # Fokus + Tastatur: Text wird an den vorhandenen Inhalt angehängt
            await element.focus()
            await session.page.keyboard.type(params.keys)
            return ToolResult(success=True, message=f"Keys sent to element using {params.locator}")

        return await self._run("send_keys", op, ToolResult)

    async def get_element_text(self, params: LocatorInput) -> ElementTextResult:
        async def op(session: BrowserSession) -> ElementTextResult:
            element = await self._locate(session, params.locator)
            text = await element.inner_text()
            return ElementTextResult(success=True, text=text, message=f"Element text: {text}")

        return await self._run("get_element_text", op, ElementTextResult)

    async def verify_element_text(self, params: VerifyElementTextInput) -> VerifyElementTextResult:
        async def op(session: BrowserSession) -> VerifyElementTextResult:
            element = await self._locate(session, params.locator)
            actual = await element.inner_text()
            if actual == params.expected_text:
                return VerifyElementTextResult(
                    success=True, actual_text=actual, message=f"Element text matches: '{actual}'",
                )
            return VerifyElementTextResult(
                success=False,
                actual_text=actual,
                message=f"Element text mismatch: expected '{params.expected_text}', got '{actual}'",
            )

        return await self._run("verify_element_text", op, VerifyElementTextResult)

    async def select_dropdown_option(self, params: SelectDropdownInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            await element.select_option(label=params.option_text)
            return ToolResult(
                success=True,
                message=f"Selected option '{params.option_text}' using {params.locator}",
            )

        return await self._run("select_dropdown_option", op, ToolResult)

    async def mouse_hover(self, params: LocatorInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            await element.hover()
            return ToolResult(success=True, message=f"Hovered over element using {params.locator}")

        return await self._run("mouse_hover", op, ToolResult)

    async def double_click(self, params: LocatorInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            await element.dblclick()
            return ToolResult(success=True, message=f"Double-clicked element using {params.locator}")

        return await self._run("double_click", op, ToolResult)

    async def right_click(self, params: LocatorInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            await element.click(button="right")
            return ToolResult(success=True, message=f"Right-clicked element using {params.locator}")

        return await self._run("right_click", op, ToolResult)

    async def upload_file(self, params: UploadFileInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            element = await self._locate(session, params.locator)
            path = Path(params.file_path).expanduser()
            if not path.is_file():
                raise DriverOperationError(f"File not found: {params.file_path}")
            await element.set_input_files(str(path))
            return ToolResult(
                success=True,
                message=f"File '{path.name}' uploaded using {params.locator}",
            )

        return await self._run("upload_file", op, ToolResult)

    async def drag_and_drop(self, params: DragAndDropInput) -> ToolResult:
        async def op(session: BrowserSession) -> ToolResult:
            source = await self._locate(session, params.source)
            target = await self._locate(session, params.target)
            mouse = session.page.mouse
            await source.hover()
            await mouse.down()
            await target.hover()
            await mouse.up()
            return ToolResult(
                success=True,
                message=f"Dragged element {params.source} onto {params.target}",
            )

        return await self._run("drag_and_drop", op, ToolResult)


# ============================================================================
# MCP-Tool-Registrierung
# ============================================================================

_READ_ONLY = {ToolAnnotationKey.READ_ONLY_HINT.value: True}
_ACTION = {ToolAnnotationKey.READ_ONLY_HINT.value: False}

# (name, title, description, input, output, annotations)
BROWSER_TOOL_SPECS: tuple[tuple[str, str, str, type, type, dict[str, Any]], ...] = (
    (
        "open_browser", "Open Browser",
        "Open a web browser session (chrome, firefox or edge).",
        OpenBrowserInput, OpenBrowserResult,
        {**_ACTION, ToolAnnotationKey.OPEN_WORLD_HINT.value: True},
    ),
    (
        "navigate_to_url", "Navigate to URL",
        "Navigate the browser to a specified URL.",
        NavigateInput, NavigateResult,
        {**_ACTION, ToolAnnotationKey.OPEN_WORLD_HINT.value: True},
    ),
    (
        "find_element", "Find Element",
        "Find an element on the current page using a specified locator strategy.",
        LocatorInput, ToolResult, _READ_ONLY,
    ),
    (
        "click_element", "Click Element",
        "Click an element on the current page using a specified locator strategy.",
        LocatorInput, ToolResult, _ACTION,
    ),
    (
        "send_keys", "Send Keys",
        "Type text into an element on the current page.",
        SendKeysInput, ToolResult, _ACTION,
    ),
    (
        "close_browser", "Close Browser",
        "Close the current web browser session.",
        EmptyInput, ToolResult,
        {**_ACTION, ToolAnnotationKey.DESTRUCTIVE_HINT.value: True},
    ),
    (
        "verify_page_title", "Verify Page Title",
        "Check that the current page title equals the expected title exactly.",
        VerifyPageTitleInput, VerifyPageTitleResult, _READ_ONLY,
    ),
    (
        "select_dropdown_option", "Select Dropdown Option",
        "Select an option of a <select> element by its visible text.",
        SelectDropdownInput, ToolResult, _ACTION,
    ),
    (
        "take_screenshot", "Take Screenshot",
        "Capture a PNG screenshot of the current page (base64-encoded).",
        EmptyInput, ScreenshotResult, _READ_ONLY,
    ),
    (
        "get_element_text", "Get Element Text",
        "Read the visible text of an element.",
        LocatorInput, ElementTextResult, _READ_ONLY,
    ),
    (
        "verify_element_text", "Verify Element Text",
        "Check that an element's visible text equals the expected text exactly.",
        VerifyElementTextInput, VerifyElementTextResult, _READ_ONLY,
    ),
    (
        "mouse_hover", "Mouse Hover",
        "Move the mouse pointer over an element.",
        LocatorInput, ToolResult, _ACTION,
    ),
    (
        "drag_and_drop", "Drag and Drop",
        "Drag a source element onto a target element.",
        DragAndDropInput, ToolResult, _ACTION,
    ),
    (
        "press_key", "Press Key",
        "Press a single key (key down + key up), e.g. 'Enter' or 'ARROW_DOWN'.",
        PressKeyInput, ToolResult, _ACTION,
    ),
    (
        "double_click", "Double Click",
        "Double-click an element.",
        LocatorInput, ToolResult, _ACTION,
    ),
    (
        "upload_file", "Upload File",
        "Set the file of an <input type=file> element to a local path.",
        UploadFileInput, ToolResult, _ACTION,
    ),
    (
        "right_click", "Right Click",
        "Context-click (right-click) an element.",
        LocatorInput, ToolResult, _ACTION,
    ),
)


def register_browser_tools(server: WebpilotMCPServer, toolset: BrowserToolset) -> list[str]:
    """Registriert alle Browser-Tools beim MCP-Server.

    Args:
        server: WebpilotMCPServer-Instanz.
        toolset: BrowserToolset, dessen Methoden als Handler dienen.

    Returns:
        Namen der registrierten Tools.
    """
    for name, title, description, input_model, output_model, annotations in BROWSER_TOOL_SPECS:
        server.register_tool(
            MCPToolDef(
                name=name,
                title=title,
                description=description,
                input_model=input_model,
                output_model=output_model,
                handler=getattr(toolset, name),
                annotations=annotations,
            )
        )

    names = [spec[0] for spec in BROWSER_TOOL_SPECS]
    log.info("browser_tools_registered", tools=names)
    return names
