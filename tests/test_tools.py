"""Tests for the built-in tools and the info resource."""

import re
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from mcp_template.framework.errors import ErrorCode, ToolInputError
from mcp_template.resources.info import INFO_TEXT, INFO_URI, info_resource, read_info
from mcp_template.server.schemas import EchoArguments, GetTimeArguments, validate_tool_input
from mcp_template.tools import default_tools
from mcp_template.tools.echo import echo_tool, handle_echo
from mcp_template.tools.get_time import format_datetime, handle_get_time, resolve_timezone

TIME_PATTERN = re.compile(
    r"^[A-Z][a-z]+day, [A-Z][a-z]+ \d{1,2}, \d{4} at \d{1,2}:\d{2}:\d{2} (AM|PM) \S+$"
)


class TestEcho:
    """Test the echo tool."""

    @pytest.mark.asyncio
    async def test_echo_prefixes_message(self) -> None:
        """Verify echo returns the message with an 'Echo: ' prefix."""
        result = await handle_echo({"message": "hi"})

        assert result.content == ("Echo: hi",)
        assert result.is_error is False

    @pytest.mark.asyncio
    async def test_echo_keeps_empty_message(self) -> None:
        """Verify an empty string is a valid message."""
        result = await handle_echo({"message": ""})
        assert result.content == ("Echo: ",)

    @pytest.mark.asyncio
    async def test_echo_requires_message(self) -> None:
        """Verify a missing message is an argument error."""
        with pytest.raises(ToolInputError) as exc_info:
            await handle_echo({})

        assert exc_info.value.message.startswith("Invalid arguments: ")
        assert "message" in exc_info.value.message
        assert exc_info.value.code == ErrorCode.TOOL_INPUT_ERROR

    @pytest.mark.asyncio
    async def test_echo_rejects_non_string(self) -> None:
        """Verify a non-string message is rejected."""
        with pytest.raises(ToolInputError):
            await handle_echo({"message": 42})

    def test_echo_schema_requires_message(self) -> None:
        """Verify the advertised schema marks message as required."""
        assert echo_tool.input_schema["required"] == ["message"]
        assert echo_tool.input_schema["properties"]["message"]["type"] == "string"


class TestGetTime:
    """Test the get_time tool."""

    @pytest.mark.asyncio
    async def test_defaults_to_utc(self) -> None:
        """Verify an omitted timezone means UTC."""
        result = await handle_get_time({})

        assert result.is_error is False
        assert result.content[0].startswith("Current time in UTC: ")

    @pytest.mark.asyncio
    async def test_empty_timezone_means_utc(self) -> None:
        """Verify an empty timezone string falls back to UTC."""
        result = await handle_get_time({"timezone": ""})
        assert result.content[0].startswith("Current time in UTC: ")

    @pytest.mark.asyncio
    async def test_named_timezone(self) -> None:
        """Verify the requested zone is echoed and the time is formatted."""
        result = await handle_get_time({"timezone": "America/New_York"})
        text = result.content[0]

        prefix = "Current time in America/New_York: "
        assert text.startswith(prefix)
        assert TIME_PATTERN.match(text[len(prefix) :])
        assert text.endswith(("EST", "EDT"))

    @pytest.mark.asyncio
    async def test_unknown_timezone(self) -> None:
        """Verify an unknown zone raises an argument error."""
        with pytest.raises(ToolInputError) as exc_info:
            await handle_get_time({"timezone": "Mars/Olympus_Mons"})

        assert exc_info.value.message == "Invalid arguments: Unknown timezone: Mars/Olympus_Mons"

    @pytest.mark.asyncio
    async def test_non_string_timezone(self) -> None:
        """Verify a non-string timezone is rejected."""
        with pytest.raises(ToolInputError):
            await handle_get_time({"timezone": 5})

    def test_resolve_timezone(self) -> None:
        """Verify known zones resolve to ZoneInfo."""
        assert resolve_timezone("UTC") == ZoneInfo("UTC")

    def test_format_datetime(self) -> None:
        """Verify the en-US long date and time layout."""
        moment = datetime(2026, 10, 17, 15, 4, 5, tzinfo=ZoneInfo("America/New_York"))
        assert format_datetime(moment) == "Saturday, October 17, 2026 at 3:04:05 PM EDT"

    def test_format_datetime_midnight(self) -> None:
        """Verify hour zero renders as 12 AM."""
        moment = datetime(2026, 1, 5, 0, 30, 0, tzinfo=ZoneInfo("UTC"))
        assert format_datetime(moment) == "Monday, January 5, 2026 at 12:30:00 AM UTC"


class TestSchemas:
    """Test argument validation models."""

    def test_validate_returns_model(self) -> None:
        """Verify validation yields the tool's model."""
        assert isinstance(validate_tool_input("echo", {"message": "x"}), EchoArguments)
        assert isinstance(validate_tool_input("get_time", None), GetTimeArguments)

    def test_unknown_tool_has_no_schema(self) -> None:
        """Verify tools without a schema are a programming error."""
        with pytest.raises(ValueError, match="No schema defined"):
            validate_tool_input("nope", {})

    def test_error_carries_path(self) -> None:
        """Verify the failing field is recorded in the error details."""
        with pytest.raises(ToolInputError) as exc_info:
            validate_tool_input("echo", {})

        assert exc_info.value.details["tool"] == "echo"
        assert exc_info.value.details["path"] == ["message"]


class TestCatalog:
    """Test the stock tool and resource catalog."""

    def test_default_tool_order(self) -> None:
        """Verify tools are declared get_time first, then echo."""
        assert [tool.name for tool in default_tools()] == ["get_time", "echo"]

    def test_info_resource_metadata(self) -> None:
        """Verify the info resource description."""
        assert info_resource.uri == INFO_URI == "mcp://info"
        assert info_resource.name == "Server Information"
        assert info_resource.mime_type == "text/plain"

    @pytest.mark.asyncio
    async def test_read_info(self) -> None:
        """Verify the info text is returned for the requested uri."""
        contents = await read_info(INFO_URI)

        assert len(contents.contents) == 1
        assert contents.contents[0].uri == INFO_URI
        assert contents.contents[0].text == INFO_TEXT
        assert INFO_TEXT.startswith("MCP Template Server v1.0.0")
