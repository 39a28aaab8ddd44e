"""Browser Types.

Enums und Datenmodelle, die zwischen Driver, Locator-Resolver und
Tool-Schicht geteilt werden.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


# ── Enums ────────────────────────────────────────────────────────

class BrowserKind(StrEnum):
    """Unterstützte Browser."""
    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"


class LocatorStrategy(StrEnum):
    """Wie ein Element auf der Seite gefunden wird."""
    ID = "id"
    CSS = "css"
    XPATH = "xpath"
    NAME = "name"
    TAG = "tag"
    CLASS = "class"


# ── Locator ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Locator:
    """(strategy, value)-Paar, wird bei jedem Aufruf neu aufgelöst."""
    strategy: LocatorStrategy | str
    value: str

    def __str__(self) -> str:
        return f"{self.strategy}: {self.value}"
