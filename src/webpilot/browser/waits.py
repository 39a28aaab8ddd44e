"""Element-Wait: expliziter Poll-Loop bis zum Deadline.

Fragt das DOM im festen Intervall per ``query_selector`` ab, statt sich
auf eine Library-interne Wait-Primitive zu verlassen. Der letzte Versuch
findet genau am Deadline statt, danach kommt ein typisiertes
ElementNotFoundError.
"""

from __future__ import annotations

import asyncio
from typing import Any

from webpilot.core.errors import ElementNotFoundError
from webpilot.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_POLL_INTERVAL_MS = 250


async def wait_for_element(
    page: Any,
    selector: str,
    *,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
) -> Any:
    """Wartet, bis ein Element im DOM existiert, und gibt dessen Handle zurück.

    Args:
        page: Playwright-Page (oder kompatibles Objekt mit ``query_selector``).
        selector: Bereits aufgelöster Playwright-Selektor.
        timeout_ms: Maximale Wartezeit. 0 = genau ein Versuch.
        poll_interval_ms: Abstand zwischen zwei Abfragen.

    Returns:
        ElementHandle des ersten Treffers.

    Raises:
        ElementNotFoundError: Kein Treffer bis zum Deadline.
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + timeout_ms / 1000
    interval = poll_interval_ms / 1000
    attempts = 0

    while True:
        attempts += 1
        handle = await page.query_selector(selector)
        if handle is not None:
            if attempts > 1:
                log.debug("element_appeared", selector=selector, attempts=attempts)
            return handle

        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    log.info(
        "element_wait_timeout",
        selector=selector,
        timeout_ms=timeout_ms,
        attempts=attempts,
        waited_ms=round((loop.time() - started) * 1000),
    )
    raise ElementNotFoundError(selector, timeout_ms)
