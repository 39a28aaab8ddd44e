"""webpilot MCP module -- Server, Tool-Modelle, Browser-Tools."""

from webpilot.mcp.models import ToolResult
from webpilot.mcp.server import MCPToolDef, ToolAnnotationKey, WebpilotMCPServer
from webpilot.mcp.tools import BROWSER_TOOL_SPECS, BrowserToolset, register_browser_tools

__all__ = [
    "BROWSER_TOOL_SPECS",
    "BrowserToolset",
    "MCPToolDef",
    "ToolAnnotationKey",
    "ToolResult",
    "WebpilotMCPServer",
    "register_browser_tools",
]
