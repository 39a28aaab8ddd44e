"""Locator Resolver -- übersetzt (strategy, value) in Playwright-Selektoren.

Reines Mapping ohne Zustand:

  id     → css=[id="value"]
  name   → css=[name="value"]
  class  → css=[class~="value"]   (genau ein Klassen-Token)
  tag    → css=value
  css    → css=value
  xpath  → xpath=value

Attributwerte werden als CSS-String gequotet, damit IDs mit Punkten,
Doppelpunkten oder Leerzeichen nicht als Selektor-Syntax gelesen werden.
"""

from __future__ import annotations

from webpilot.browser.types import Locator, LocatorStrategy
from webpilot.core.errors import UnsupportedLocatorStrategyError

__all__ = ["css_string", "resolve_locator", "selector_for"]


def css_string(value: str) -> str:
    """Quotet einen Wert als CSS-String-Literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def resolve_locator(strategy: LocatorStrategy | str, value: str) -> str:
    """Gibt den nativen Selektor für ein (strategy, value)-Paar zurück.

    Raises:
        UnsupportedLocatorStrategyError: Strategie ist keine der sechs bekannten.
    """
    try:
        kind = LocatorStrategy(strategy)
    except ValueError:
        raise UnsupportedLocatorStrategyError(str(strategy)) from None

    if kind is LocatorStrategy.ID:
        return f"css=[id={css_string(value)}]"
    if kind is LocatorStrategy.NAME:
        return f"css=[name={css_string(value)}]"
    if kind is LocatorStrategy.CLASS:
        return f"css=[class~={css_string(value)}]"
    if kind is LocatorStrategy.XPATH:
        return f"xpath={value}"
    # tag und css sind beide gewöhnliche CSS-Selektoren
    return f"css={value}"


def selector_for(locator: Locator) -> str:
    """Convenience-Wrapper für Locator-Objekte."""
    return resolve_locator(locator.strategy, locator.value)
