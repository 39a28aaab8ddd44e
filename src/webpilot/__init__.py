"""webpilot · Browser-Automatisierung als MCP-Tools.

Ein externer Agent steuert eine einzelne Browser-Session Schritt für
Schritt über JSON-RPC auf stdio. Die eigentliche Arbeit (DOM, Input,
Screenshots) erledigt Playwright.
"""

__version__ = "1.0.0"
