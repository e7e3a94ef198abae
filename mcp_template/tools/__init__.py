"""
Tool catalog.

Each module defines one ToolDefinition. ``default_tools()`` returns them in
declaration order, which is also the order clients see in tools/list.
"""

from mcp_template.framework.tool_interface import ToolDefinition

from .echo import echo_tool
from .get_time import get_time_tool


def default_tools() -> list[ToolDefinition]:
    """Tools registered by the stock server."""
    return [get_time_tool, echo_tool]


__all__ = ["default_tools", "echo_tool", "get_time_tool"]
