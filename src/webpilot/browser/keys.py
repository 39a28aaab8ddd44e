"""Key-Namen für press_key.

Agenten schicken oft WebDriver-Namen (ENTER, ARROW_UP, ...). Playwright
erwartet DOM-Key-Namen (Enter, ArrowUp, ...). Unbekannte Namen werden
unverändert durchgereicht, Playwright meldet dann selbst den Fehler.
"""

from __future__ import annotations

_KEY_ALIASES: dict[str, str] = {
    "ENTER": "Enter",
    "RETURN": "Enter",
    "TAB": "Tab",
    "ESCAPE": "Escape",
    "ESC": "Escape",
    "SPACE": "Space",
    "BACKSPACE": "Backspace",
    "BACK_SPACE": "Backspace",
    "DELETE": "Delete",
    "INSERT": "Insert",
    "HOME": "Home",
    "END": "End",
    "PAGE_UP": "PageUp",
    "PAGE_DOWN": "PageDown",
    "ARROW_UP": "ArrowUp",
    "ARROW_DOWN": "ArrowDown",
    "ARROW_LEFT": "ArrowLeft",
    "ARROW_RIGHT": "ArrowRight",
    "UP": "ArrowUp",
    "DOWN": "ArrowDown",
    "LEFT": "ArrowLeft",
    "RIGHT": "ArrowRight",
    "SHIFT": "Shift",
    "CONTROL": "Control",
    "CTRL": "Control",
    "ALT": "Alt",
    "META": "Meta",
    "COMMAND": "Meta",
}


def normalize_key(key: str) -> str:
    """Übersetzt WebDriver-Key-Namen in Playwright-Key-Namen."""
    alias = _KEY_ALIASES.get(key.upper())
    if alias is not None:
        return alias
    # F1..F12 case-insensitiv
    upper = key.upper()
    if len(upper) in (2, 3) and upper.startswith("F") and upper[1:].isdigit():
        return upper
    return key
