"""echo: return the given message. Useful for testing the transports."""

from typing import Any

from mcp_template.framework.tool_interface import ToolDefinition, ToolResult
from mcp_template.server.schemas import validate_tool_input


async def handle_echo(arguments: dict[str, Any]) -> ToolResult:
    args = validate_tool_input("echo", arguments)
    return ToolResult.text(f"Echo: {args.message}")


echo_tool = ToolDefinition(
    name="echo",
    description="Echo back a message",
    input_schema={
        "type": "object",
        "properties": {
            "message": {
                "type": "string",
                "description": "Message to echo back",
            },
        },
        "required": ["message"],
    },
    handler=handle_echo,
)
