"""
webpilot · Entry Point.

Usage: webpilot
       webpilot --config /path/to/config.yaml
       webpilot --headless --log-level DEBUG
       webpilot --version
       python -m webpilot

Der Prozess spricht MCP (JSON-RPC 2.0) auf stdin/stdout. Logs gehen
nach stderr.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from webpilot import __version__


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Kommandozeilen-Argumente parsen."""
    parser = argparse.ArgumentParser(
        prog="webpilot",
        description="webpilot -- Browser-Automatisierung als MCP-Tools über stdio",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"webpilot v{__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Pfad zur config.yaml (Default: ~/.webpilot/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log-Level überschreiben",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Browser ohne sichtbares Fenster starten",
    )
    return parser.parse_args(argv)


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Übersetzt gesetzte CLI-Flags in ein verschachteltes Config-Dict."""
    overrides: dict[str, Any] = {}
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.headless:
        overrides.setdefault("browser", {})["headless"] = True
    return overrides


def main(argv: list[str] | None = None) -> None:
    """Haupteintrittspunkt für webpilot."""
    args = parse_args(argv)

    # 0. .env-Datei laden (Projekt-.env, dann User-.env)
    load_dotenv(Path(".env"), override=False)
    load_dotenv(Path.home() / ".webpilot" / ".env", override=True)

    # 1. Konfiguration laden
    from webpilot.config import load_config

    config = load_config(args.config, overrides=cli_overrides(args))

    # 2. Logging initialisieren
    from webpilot.utils.logging import get_logger, setup_logging

    setup_logging(
        level=config.logging.level,
        log_dir=config.logging.log_dir,
        json_logs=config.logging.json_logs,
        console=config.logging.console,
    )
    log = get_logger("webpilot")
    log.info(
        "webpilot_starting",
        version=__version__,
        config_file=str(config.config_file),
        headless=config.browser.headless,
        element_timeout_ms=config.waits.element_timeout_ms,
    )

    # 3. stdio-Server bis EOF oder Signal
    from webpilot.app import run

    asyncio.run(run(config))


if __name__ == "__main__":
    main()
