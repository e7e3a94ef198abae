"""get_time: current wall-clock time in an IANA timezone."""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mcp_template.framework.errors import ToolInputError
from mcp_template.framework.tool_interface import ToolDefinition, ToolResult
from mcp_template.server.schemas import validate_tool_input

DEFAULT_TIMEZONE = "UTC"


def format_datetime(moment: datetime) -> str:
    """Render like an en-US full date with long time.

    Example: "Saturday, October 17, 2026 at 3:04:05 PM EDT"
    """
    hour = moment.hour % 12 or 12
    return (
        f"{moment:%A, %B} {moment.day}, {moment.year} at "
        f"{hour}:{moment:%M:%S %p} {moment.tzname()}"
    )


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA zone, raising ToolInputError for unknown names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        msg = f"Invalid arguments: Unknown timezone: {name}"
        raise ToolInputError(msg, tool_name="get_time", path=["timezone"]) from e


async def handle_get_time(arguments: dict[str, Any]) -> ToolResult:
    args = validate_tool_input("get_time", arguments)
    timezone = args.timezone or DEFAULT_TIMEZONE

    now = datetime.now(resolve_timezone(timezone))
    return ToolResult.text(f"Current time in {timezone}: {format_datetime(now)}")


get_time_tool = ToolDefinition(
    name="get_time",
    description="Get the current time in a specified timezone",
    input_schema={
        "type": "object",
        "properties": {
            "timezone": {
                "type": "string",
                "description": "Timezone (e.g., 'America/New_York', 'UTC')",
            },
        },
    },
    handler=handle_get_time,
)
