"""Tests für die Ein- und Ausgabe-Modelle der Browser-Tools."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from webpilot.browser.types import BrowserKind, LocatorStrategy
from webpilot.core.errors import ElementNotFoundError, ErrorKind, NoActiveSessionError
from webpilot.mcp.models import (
    DragAndDropInput,
    NavigateInput,
    OpenBrowserInput,
    PressKeyInput,
    ScreenshotResult,
    SelectDropdownInput,
    ToolResult,
    VerifyElementTextResult,
    VerifyPageTitleInput,
)


class TestInputModels:
    def test_open_browser_default_chrome(self) -> None:
        assert OpenBrowserInput().browser is BrowserKind.CHROME

    def test_open_browser_rejects_safari(self) -> None:
        with pytest.raises(ValidationError):
            OpenBrowserInput.model_validate({"browser": "safari"})

    def test_navigate_valid_url(self) -> None:
        assert NavigateInput(url="https://example.com").url == "https://example.com"

    @pytest.mark.parametrize("url", ["not a url", "example", ""])
    def test_navigate_invalid_url(self, url: str) -> None:
        with pytest.raises(ValidationError):
            NavigateInput(url=url)

    def test_camel_case_aliases(self) -> None:
        params = SelectDropdownInput.model_validate({"by": "id", "value": "s", "optionText": "Two"})
        assert params.option_text == "Two"
        assert params.by is LocatorStrategy.ID

    def test_snake_case_accepted(self) -> None:
        assert VerifyPageTitleInput(expected_title="Home").expected_title == "Home"

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SelectDropdownInput.model_validate({"by": "link", "value": "s", "optionText": "x"})

    def test_press_key_not_empty(self) -> None:
        with pytest.raises(ValidationError):
            PressKeyInput(key="")

    def test_drag_locators(self) -> None:
        params = DragAndDropInput.model_validate({
            "sourceBy": "id", "sourceValue": "a", "targetBy": "css", "targetValue": "#b",
        })
        assert str(params.source) == "id: a"
        assert str(params.target) == "css: #b"


class TestSchemas:
    def test_input_schema_uses_wire_names(self) -> None:
        schema = VerifyPageTitleInput.model_json_schema(by_alias=True)
        assert "expectedTitle" in schema["properties"]
        assert schema["required"] == ["expectedTitle"]

    def test_navigate_schema_uri_format(self) -> None:
        schema = NavigateInput.model_json_schema(by_alias=True)
        assert schema["properties"]["url"]["format"] == "uri"

    def test_output_schema_has_error_kind(self) -> None:
        schema = VerifyElementTextResult.model_json_schema(by_alias=True, mode="serialization")
        assert "errorKind" in schema["properties"]
        assert "actualText" in schema["properties"]


class TestToolResult:
    def test_wire_excludes_none(self) -> None:
        wire = ToolResult(success=True, message="ok").to_wire()
        assert wire == {"success": True, "message": "ok"}

    def test_failure_from_exception(self) -> None:
        result = ToolResult.failure(NoActiveSessionError())
        assert result.success is False
        assert result.error_kind is ErrorKind.NO_ACTIVE_SESSION
        assert result.to_wire() == {
            "success": False,
            "message": "No active browser session. Please open a browser first.",
            "errorKind": "no_active_session",
        }

    def test_failure_with_fields(self) -> None:
        result = VerifyElementTextResult.failure(ElementNotFoundError("css=#x", 100), actual_text=None)
        assert result.to_wire()["errorKind"] == "element_not_found"

    def test_failure_unknown_exception(self) -> None:
        result = ToolResult.failure(RuntimeError("Target page closed"))
        assert result.error_kind is ErrorKind.DRIVER_OPERATION
        assert result.message == "Target page closed"

    def test_failure_empty_message_uses_type(self) -> None:
        assert ToolResult.failure(TimeoutError()).message == "TimeoutError"

    def test_screenshot_image_block(self) -> None:
        result = ScreenshotResult(success=True, message="Screenshot captured.", screenshot="aGk=")
        assert result.extra_content() == [{"type": "image", "data": "aGk=", "mimeType": "image/png"}]
        assert ScreenshotResult(success=False, message="x").extra_content() == []
