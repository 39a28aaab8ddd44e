"""webpilot · Application wiring.

Baut Server, Toolset und Session zusammen und betreibt die
stdio-Schleife bis EOF oder Signal. Danach wird die aktive
Browser-Session geschlossen.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
from typing import TYPE_CHECKING, Callable

from webpilot.lifecycle import close_active_session, install_signal_handlers, remove_signal_handlers
from webpilot.mcp.server import WebpilotMCPServer
from webpilot.mcp.tools import BrowserToolset, register_browser_tools
from webpilot.utils.logging import ensure_stderr_logging, get_logger

if TYPE_CHECKING:
    from webpilot.config import WebpilotConfig

log = get_logger(__name__)


def build_server(config: WebpilotConfig) -> tuple[WebpilotMCPServer, BrowserToolset]:
    """Erzeugt einen Server mit allen Browser-Tools und eigener Session."""
    server = WebpilotMCPServer(config.server)
    toolset = BrowserToolset(config)
    register_browser_tools(server, toolset)
    return server, toolset


async def run(
    config: WebpilotConfig,
    *,
    reader: asyncio.StreamReader | None = None,
    write: Callable[[str], None] | None = None,
) -> None:
    """Betreibt den MCP-Server auf stdio bis EOF oder SIGINT/SIGTERM."""
    ensure_stderr_logging()
    server, toolset = build_server(config)
    loop = asyncio.get_running_loop()
    serve_task = asyncio.create_task(server.serve_stdio(reader=reader, write=write))

    def _on_signal(sig: signal.Signals) -> None:
        log.info("shutdown_signal_received", signal=sig.name)
        server.stop()
        serve_task.cancel()

    installed = install_signal_handlers(loop, _on_signal)
    try:
        with contextlib.suppress(asyncio.CancelledError):
            await serve_task
    finally:
        remove_signal_handlers(loop, installed)
        await close_active_session(toolset.sessions)
        log.info("webpilot_stopped", **server.stats())
