"""Lifecycle Hooks -- Browser beim Prozessende schließen.

Bei EOF auf stdin, SIGINT oder SIGTERM wird versucht, die aktive Session
zu beenden. Jeder Fehler (z.B. keine aktive Session) wird geloggt und
geschluckt: das Beenden des Prozesses geht immer vor.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING, Callable

from webpilot.core.errors import NoActiveSessionError
from webpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from webpilot.browser.session import SessionManager

log = get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def close_active_session(sessions: SessionManager) -> bool:
    """Schließt die aktive Session, falls vorhanden.

    Returns:
        True, wenn eine Session sauber geschlossen wurde.
    """
    try:
        session = sessions.get_active()
    except NoActiveSessionError as exc:
        log.info("shutdown_no_active_session", reason=str(exc))
        return False

    sessions.clear()
    try:
        await session.close()
    except Exception as exc:
        log.warning("shutdown_session_close_failed", browser=session.kind.value, error=str(exc))
        return False

    log.info("shutdown_session_closed", browser=session.kind.value)
    return True


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    callback: Callable[[signal.Signals], None],
) -> list[signal.Signals]:
    """Registriert callback für SIGINT und SIGTERM.

    Returns:
        Die tatsächlich registrierten Signale (unter Windows keine).
    """
    installed: list[signal.Signals] = []
    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, callback, sig)
        except (NotImplementedError, RuntimeError) as exc:
            log.debug("signal_handler_unavailable", signal=sig.name, error=str(exc))
            continue
        installed.append(sig)
    return installed


def remove_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    signals: list[signal.Signals],
) -> None:
    for sig in signals:
        loop.remove_signal_handler(sig)
