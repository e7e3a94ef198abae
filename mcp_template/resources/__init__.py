"""Resource catalog."""

from mcp_template.framework.tool_interface import ResourceDefinition

from .info import info_resource


def default_resources() -> list[ResourceDefinition]:
    """Resources registered by the stock server."""
    return [info_resource]


__all__ = ["default_resources", "info_resource"]
