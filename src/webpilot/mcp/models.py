"""Ein- und Ausgabe-Modelle der Browser-Tools.

Jedes Tool deklariert ein Pydantic-Input-Modell (daraus wird das
MCP ``inputSchema``) und ein Output-Modell (``outputSchema``). Feldnamen
sind im Code snake_case und auf dem Draht camelCase
(``expected_title`` ↔ ``expectedTitle``).

Alle Output-Modelle erben von ToolResult: ``success`` + ``message``,
bei Fehlern zusätzlich ``errorKind``.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from webpilot.browser.types import BrowserKind, Locator, LocatorStrategy
from webpilot.core.errors import ErrorKind, error_kind_of

_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


class WireModel(BaseModel):
    """Basis: camelCase auf dem Draht, snake_case im Code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Input-Modelle
# ============================================================================


class EmptyInput(WireModel):
    """Tools ohne Parameter."""


class OpenBrowserInput(WireModel):
    browser: BrowserKind = Field(
        default=BrowserKind.CHROME,
        description="Welcher Browser gestartet wird",
    )


class NavigateInput(WireModel):
    url: str = Field(description="Ziel-URL (mit Schema, z.B. https://)", json_schema_extra={"format": "uri"})

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError:
            raise ValueError(f"Invalid URL: {value!r}") from None
        return value


class LocatorInput(WireModel):
    """(by, value)-Paar für alle Element-Tools."""

    by: LocatorStrategy = Field(description="Locator-Strategie")
    value: str = Field(description="Wert für die Locator-Strategie")

    @property
    def locator(self) -> Locator:
        return Locator(self.by, self.value)


class SendKeysInput(LocatorInput):
    keys: str = Field(description="Zu tippender Text")


class SelectDropdownInput(LocatorInput):
    option_text: str = Field(description="Sichtbarer Text der Option")


class VerifyElementTextInput(LocatorInput):
    expected_text: str = Field(description="Erwarteter Text (exakter Vergleich)")


class UploadFileInput(LocatorInput):
    file_path: str = Field(description="Absoluter Pfad der hochzuladenden Datei")


class VerifyPageTitleInput(WireModel):
    expected_title: str = Field(description="Erwarteter Seitentitel (exakter Vergleich)")


class PressKeyInput(WireModel):
    key: str = Field(min_length=1, description="Taste, z.B. 'Enter', 'Tab', 'ARROW_DOWN'")


class DragAndDropInput(WireModel):
    source_by: LocatorStrategy = Field(description="Locator-Strategie des Quell-Elements")
    source_value: str = Field(description="Locator-Wert des Quell-Elements")
    target_by: LocatorStrategy = Field(description="Locator-Strategie des Ziel-Elements")
    target_value: str = Field(description="Locator-Wert des Ziel-Elements")

    @property
    def source(self) -> Locator:
        return Locator(self.source_by, self.source_value)

    @property
    def target(self) -> Locator:
        return Locator(self.target_by, self.target_value)


# ============================================================================
# Output-Modelle
# ============================================================================


class ToolResult(WireModel):
    """Einheitlicher Ergebnis-Umschlag für jeden Tool-Aufruf."""

    success: bool
    message: str
    error_kind: ErrorKind | None = Field(
        default=None,
        description="Fehlerkategorie, nur bei success=false",
    )

    @classmethod
    def failure(cls, exc: BaseException, **fields: Any) -> Self:
        """Baut einen Fehler-Umschlag aus einer Exception."""
        return cls(
            success=False,
            message=str(exc) or type(exc).__name__,
            error_kind=error_kind_of(exc),
            **fields,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def extra_content(self) -> list[dict[str, Any]]:
        """Zusätzliche MCP-Content-Blöcke neben der Text-Nachricht."""
        return []


class OpenBrowserResult(ToolResult):
    browser: BrowserKind | None = None


class NavigateResult(ToolResult):
    url: str | None = None


class VerifyPageTitleResult(ToolResult):
    actual_title: str | None = None


class ScreenshotResult(ToolResult):
    screenshot: str | None = Field(default=None, description="PNG, base64-kodiert")

    def extra_content(self) -> list[dict[str, Any]]:
        if not self.screenshot:
            return []
        return [{"type": "image", "data": self.screenshot, "mimeType": "image/png"}]


class ElementTextResult(ToolResult):
    text: str | None = None


class VerifyElementTextResult(ToolResult):
    actual_text: str | None = None
