"""MCP-Server: Exponiert die Browser-Tools als Standard-MCP-Server.

Externe MCP-Clients (Claude Desktop, Cursor, VS Code, andere Agenten)
starten webpilot als Subprozess und sprechen JSON-RPC 2.0 über stdio.

Unterstützte Methoden:
  - initialize / notifications/initialized
  - tools/list, tools/call (mit inputSchema, outputSchema, Annotations)
  - logging/setLevel
  - ping

Dispatch-Vertrag für tools/call:
  1. Argumente gegen das Input-Modell validieren. Fehler → JSON-RPC-Error
     -32602, der Handler läuft nicht.
  2. Handler mit dem validierten Modell aufrufen.
  3. Ergebnis als ``content`` (Text, ggf. Bild) + ``structuredContent``
     (der Umschlag) zurückgeben. Handler-Fehler sind immer Tool-Ergebnisse,
     nie Protokoll-Fehler.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from webpilot.core.errors import ErrorKind
from webpilot.mcp.models import ToolResult
from webpilot.utils.logging import bind_context, get_logger, unbind_context

if TYPE_CHECKING:
    from webpilot.config import ServerSettings

log = get_logger(__name__)

# Protokoll-Version (MCP Spec). structuredContent/outputSchema gibt es ab 2025-06-18.
PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")

# JSON-RPC Fehlercodes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Maximale Länge einer JSON-Zeile auf stdin (send_keys mit langem Text etc.)
STDIO_READ_LIMIT = 16 * 1024 * 1024

# MCP-Log-Level → stdlib
_MCP_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}

__all__ = [
    "MCPToolDef",
    "ToolAnnotationKey",
    "WebpilotMCPServer",
    "PROTOCOL_VERSION",
]


# ============================================================================
# Tool Annotations (MCP Spec)
# ============================================================================


class ToolAnnotationKey(StrEnum):
    """Standard MCP Tool Annotation Keys."""

    TITLE = "title"
    READ_ONLY_HINT = "readOnlyHint"
    DESTRUCTIVE_HINT = "destructiveHint"
    IDEMPOTENT_HINT = "idempotentHint"
    OPEN_WORLD_HINT = "openWorldHint"


@dataclass(frozen=True)
class MCPToolDef:
    """Vollständige MCP-Tool-Definition. Nach der Registrierung unveränderlich."""

    name: str
    title: str
    description: str
    input_model: type[BaseModel]
    output_model: type[ToolResult]
    handler: Callable[[Any], Awaitable[ToolResult]]
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)

    @property
    def output_schema(self) -> dict[str, Any]:
        return self.output_model.model_json_schema(by_alias=True, mode="serialization")

    def to_mcp_schema(self) -> dict[str, Any]:
        """Konvertiert in MCP-Spec-kompatibles JSON."""
        schema: dict[str, Any] = {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema,
            "outputSchema": self.output_schema,
        }
        if self.annotations:
            schema["annotations"] = {ToolAnnotationKey.TITLE.value: self.title, **self.annotations}
        return schema


def _error(code: int, message: str, data: Any = None) -> dict[str, Any]:
    err: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        err["data"] = data
    return {"error": err}


# ============================================================================
# MCP Server
# ============================================================================


class WebpilotMCPServer:
    """Tool-Registry, Dispatcher und stdio-Transport in einem.

    Nutzung:
        server = WebpilotMCPServer(config.server)
        register_browser_tools(server, toolset)
        await server.serve_stdio()
    """

    def __init__(self, config: ServerSettings) -> None:
        self._config = config
        self._tools: dict[str, MCPToolDef] = {}
        self._running = False
        self._request_count = 0
        self._start_time: float = 0
        self._client_info: dict[str, Any] = {}

    # ── Registration API ─────────────────────────────────────────

    def register_tool(self, tool: MCPToolDef) -> None:
        """Registriert ein Tool beim MCP-Server."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' ist bereits registriert")
        self._tools[tool.name] = tool
        log.debug("mcp_server_tool_registered", tool=tool.name)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_tool(self, name: str) -> MCPToolDef | None:
        return self._tools.get(name)

    # ── MCP Protocol Handlers ────────────────────────────────────

    async def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Behandelt initialize-Request vom Client."""
        requested = params.get("protocolVersion", PROTOCOL_VERSION)
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else PROTOCOL_VERSION
        self._client_info = params.get("clientInfo") or {}
        log.info(
            "mcp_client_initialized",
            client=self._client_info.get("name", "unknown"),
            protocol=version,
        )
        return {
            "protocolVersion": version,
            "capabilities": {
                "tools": {"listChanged": False},
                "logging": {},
            },
            "serverInfo": {
                "name": self._config.name,
                "version": self._config.version,
            },
        }

    async def handle_tools_list(self) -> dict[str, Any]:
        """Behandelt tools/list-Request."""
        return {"tools": [tool.to_mcp_schema() for tool in self._tools.values()]}

    async def handle_tools_call(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Behandelt tools/call-Request."""
        tool = self._tools.get(name)
        if tool is None:
            return _error(INVALID_PARAMS, f"Unknown tool: {name}")

        try:
            params = tool.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            log.info("mcp_tool_arguments_rejected", tool=name, errors=exc.error_count())
            return _error(
                INVALID_PARAMS,
                f"Invalid arguments for tool '{name}'",
                json.loads(exc.json(include_url=False)),
            )

        bind_context(tool=name)
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                tool.handler(params), timeout=self._config.handler_timeout_s,
            )
        except asyncio.TimeoutError:
            log.error("mcp_server_tool_timeout", timeout_s=self._config.handler_timeout_s)
            result = tool.output_model(
                success=False,
                message=f"Tool '{name}' timed out after {self._config.handler_timeout_s}s",
                error_kind=ErrorKind.DRIVER_OPERATION,
            )
        except Exception as exc:
            # Handler konvertieren selbst; hier landet nur ein Programmierfehler
            log.exception("mcp_server_tool_error", error=str(exc))
            result = tool.output_model.failure(exc)
        finally:
            unbind_context("tool")

        log.info(
            "mcp_tool_call",
            tool=name,
            success=result.success,
            error_kind=result.error_kind,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return {
            "content": [{"type": "text", "text": result.message}, *result.extra_content()],
            "structuredContent": result.to_wire(),
            "isError": not result.success,
        }

    async def handle_logging_set_level(self, level: str) -> dict[str, Any]:
        """Behandelt logging/setLevel-Request."""
        stdlib_level = _MCP_LOG_LEVELS.get(level.lower())
        if stdlib_level is None:
            return _error(INVALID_PARAMS, f"Unknown log level: {level}")
        logging.getLogger().setLevel(stdlib_level)
        log.info("mcp_server_log_level_set", level=level)
        return {}

    async def _handle_ping(self) -> dict[str, Any]:
        """Ping-Handler für Health-Checks."""
        return {}

    async def _handle_initialized(self) -> dict[str, Any]:
        return {}

    # ── JSON-RPC Dispatcher ──────────────────────────────────────

    async def dispatch(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Dispatcht einen JSON-RPC-2.0-Request an den richtigen Handler.

        Args:
            method: JSON-RPC-Methode (z.B. "tools/list")
            params: Parameter-Dict

        Returns:
            Result-Dict oder ``{"error": {...}}`` für die JSON-RPC-Response
        """
        params = params or {}
        self._request_count += 1

        handlers: dict[str, Callable[[], Awaitable[dict[str, Any]]]] = {
            "initialize": lambda: self.handle_initialize(params),
            "notifications/initialized": self._handle_initialized,
            "ping": self._handle_ping,
            "tools/list": self.handle_tools_list,
            "tools/call": lambda: self.handle_tools_call(
                name=params.get("name", ""),
                arguments=params.get("arguments"),
            ),
            "logging/setLevel": lambda: self.handle_logging_set_level(
                level=str(params.get("level", "info")),
            ),
        }

        handler = handlers.get(method)
        if handler is None:
            return _error(METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            return await handler()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("mcp_server_dispatch_error", method=method, error=str(exc))
            return _error(INTERNAL_ERROR, "Internal server error")

    # ── JSON-RPC Message Processing ──────────────────────────────

    async def process_jsonrpc_message(self, message: Any) -> dict[str, Any] | None:
        """Verarbeitet eine JSON-RPC-2.0-Nachricht.

        Unterstützt Requests (mit id) und Notifications (ohne id).

        Returns:
            JSON-RPC-Response-Dict oder None für Notifications.
        """
        if not isinstance(message, dict):
            return {"jsonrpc": "2.0", "id": None, **_error(INVALID_REQUEST, "Invalid request")}

        method = message.get("method")
        params = message.get("params")
        msg_id = message.get("id")

        if not isinstance(method, str):
            if msg_id is not None and ("result" in message or "error" in message):
                # Antwort auf eine Server-Anfrage; wir stellen keine.
                return None
            return {"jsonrpc": "2.0", "id": msg_id, **_error(INVALID_REQUEST, "Invalid request")}

        if params is not None and not isinstance(params, dict):
            if msg_id is None:
                return None
            return {"jsonrpc": "2.0", "id": msg_id, **_error(INVALID_PARAMS, "params must be an object")}

        # Notification (kein id) → kein Response
        if msg_id is None:
            await self.dispatch(method, params)
            return None

        result = await self.dispatch(method, params)

        if "error" in result:
            return {"jsonrpc": "2.0", "id": msg_id, "error": result["error"]}
        return {"jsonrpc": "2.0", "id": msg_id, "result": result}

    # ── stdio Transport ──────────────────────────────────────────

    async def serve_stdio(
        self,
        reader: asyncio.StreamReader | None = None,
        write: Callable[[str], None] | None = None,
    ) -> None:
        """Liest JSON-RPC-Nachrichten von stdin, schreibt auf stdout.

        Implementiert das MCP stdio-Protokoll:
        - Liest Zeile für Zeile von stdin
        - Jede Zeile ist ein JSON-RPC-2.0-Message
        - Responses werden als JSON-Zeile auf stdout geschrieben

        Läuft bis EOF auf stdin oder bis ``stop()`` aufgerufen wird.
        """
        if reader is None:
            reader = asyncio.StreamReader(limit=STDIO_READ_LIMIT)
            protocol = asyncio.StreamReaderProtocol(reader)
            await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)
        if write is None:
            write = _write_stdout

        self._running = True
        self._start_time = time.time()
        log.info("mcp_server_stdio_started", tools=len(self._tools))

        while self._running:
            try:
                line = await asyncio.wait_for(reader.readline(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except ValueError as exc:
                # Zeile länger als das Reader-Limit; der Reader hat sie verworfen
                log.warning("mcp_server_line_too_long", error=str(exc))
                write(json.dumps({"jsonrpc": "2.0", "id": None, **_error(INVALID_REQUEST, "Request too large")}))
                continue
            if not line:
                log.info("mcp_server_stdin_closed")
                break
            if not line.strip():
                continue

            try:
                message = json.loads(line.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                log.warning("mcp_server_invalid_json", error=str(exc))
                write(json.dumps({"jsonrpc": "2.0", "id": None, **_error(PARSE_ERROR, "Parse error")}))
                continue

            response = await self.process_jsonrpc_message(message)
            if response is not None:
                write(json.dumps(response, ensure_ascii=False))

        self._running = False
        log.info("mcp_server_stdio_stopped", requests=self._request_count)

    def stop(self) -> None:
        """Beendet die stdio-Schleife nach der laufenden Nachricht."""
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    # ── Stats ────────────────────────────────────────────────────

    def stats(self) -> dict[str, Any]:
        """Gibt Statistiken des MCP-Servers zurück."""
        uptime = time.time() - self._start_time if self._start_time else 0
        return {
            "running": self._running,
            "uptime_seconds": round(uptime, 1),
            "tools_registered": len(self._tools),
            "total_requests": self._request_count,
            "client": self._client_info.get("name", ""),
            "server_info": {
                "name": self._config.name,
                "version": self._config.version,
                "protocol_version": PROTOCOL_VERSION,
            },
        }


def _write_stdout(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()
