"""webpilot Browser -- Session-Lebenszyklus und Element-Zugriff.

Kern-Komponenten:
  - DriverFactory:    Startet chrome/firefox/edge über Playwright
  - SessionManager:   Single-Slot für die aktive BrowserSession
  - resolve_locator:  (strategy, value) → Playwright-Selektor
  - wait_for_element: Poll-Loop bis das Element existiert
"""

from webpilot.browser.driver import DriverFactory
from webpilot.browser.keys import normalize_key
from webpilot.browser.locators import resolve_locator
from webpilot.browser.session import BrowserSession, SessionManager
from webpilot.browser.types import BrowserKind, Locator, LocatorStrategy
from webpilot.browser.waits import wait_for_element

__all__ = [
    "BrowserKind",
    "BrowserSession",
    "DriverFactory",
    "Locator",
    "LocatorStrategy",
    "SessionManager",
    "normalize_key",
    "resolve_locator",
    "wait_for_element",
]
