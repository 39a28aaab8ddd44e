"""
webpilot · Configuration system.

Loads configuration from:
  1. Defaults (defined here)
  2. ~/.webpilot/config.yaml (overrides defaults)
  3. Environment variables WEBPILOT_* (overrides everything)

The core never reads files itself: the entry point loads the config once
and hands the validated model to the server, the driver factory and the
tool layer.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from webpilot import __version__

log = logging.getLogger(__name__)

ENV_PREFIX = "WEBPILOT_"
DEFAULT_HOME = Path.home() / ".webpilot"

# ============================================================================
# Konfigurationsmodelle
# ============================================================================


class BrowserSettings(BaseModel):
    """Start-Optionen für den Browser."""

    headless: bool = False
    maximize: bool = True
    # Default-Timeout für Playwright-Aktionen (Klick-Actionability, select_option, ...)
    action_timeout_ms: int = Field(default=10_000, ge=100, le=600_000)
    edge_channel: str = "msedge"


class WaitSettings(BaseModel):
    """Element-Wait: Poll-Loop mit festem Deadline."""

    element_timeout_ms: int = Field(default=10_000, ge=0, le=600_000)
    poll_interval_ms: int = Field(default=250, ge=10, le=10_000)


class SessionSettings(BaseModel):
    """Verhalten bei open_browser, wenn schon eine Session läuft."""

    on_open_when_active: Literal["reject", "replace"] = "reject"


class ServerSettings(BaseModel):
    """MCP-Server Identität und Handler-Limits."""

    name: str = "webpilot"
    version: str = __version__
    handler_timeout_s: float = Field(default=120.0, gt=0, le=3600)


class LoggingConfig(BaseModel):
    """Logging-Konfiguration."""

    level: str = "INFO"
    json_logs: bool = False
    console: bool = True
    log_dir: Path | None = None


# ============================================================================
# Haupt-Konfiguration
# ============================================================================


class WebpilotConfig(BaseModel):
    """Complete webpilot configuration.

    Loaded once at startup and then passed to every component.
    """

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    waits: WaitSettings = Field(default_factory=WaitSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    config_file: Path | None = Field(default=None, exclude=True)


# ============================================================================
# Config-Laden
# ============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Tiefes Mergen von zwei Dicts. Override gewinnt bei Konflikten."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(
    data: dict[str, Any],
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Wendet WEBPILOT_* Umgebungsvariablen an.

    Konvention: WEBPILOT_SECTION_KEY → data["section"]["key"]
    Beispiel: WEBPILOT_WAITS_ELEMENT_TIMEOUT_MS → data["waits"]["element_timeout_ms"]
    """
    env = os.environ if environ is None else environ
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        parts = key[len(ENV_PREFIX):].lower().split("_")
        if len(parts) >= 2:
            section = parts[0]
            node = data.setdefault(section, {})
            if not isinstance(node, dict):
                continue
            node["_".join(parts[1:])] = value
        elif len(parts) == 1 and parts[0]:
            data[parts[0]] = value
    return data


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> WebpilotConfig:
    """Lädt die Konfiguration.

    Reihenfolge (spätere überschreiben frühere):
      1. Defaults (in den Pydantic-Modellen)
      2. config.yaml (wenn vorhanden)
      3. WEBPILOT_* Umgebungsvariablen
      4. overrides (z.B. aus CLI-Flags)

    Args:
        config_path: Expliziter Pfad zur config.yaml. Wenn None: ~/.webpilot/config.yaml
        overrides: Verschachteltes Dict, das zuletzt gemerged wird.

    Returns:
        Vollständig validierte WebpilotConfig.
    """
    data: dict[str, Any] = {}

    if config_path is None:
        config_path = DEFAULT_HOME / "config.yaml"

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                file_data = yaml.safe_load(f) or {}
            if isinstance(file_data, dict):
                data = file_data
        except yaml.YAMLError as exc:
            log.warning("Fehlerhafte config.yaml wird ignoriert: %s", exc)

    data = _apply_env_overrides(data)

    if overrides:
        data = _deep_merge(data, overrides)

    config = WebpilotConfig(**data)
    config.config_file = config_path
    return config
