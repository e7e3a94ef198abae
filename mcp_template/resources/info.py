"""mcp://info: static description of this server."""

from mcp_template.framework.tool_interface import (
    ResourceContent,
    ResourceContents,
    ResourceDefinition,
)

INFO_URI = "mcp://info"

INFO_TEXT = """MCP Template Server v1.0.0

This is an example MCP server that provides:
- Time utilities
- Echo functionality
- Custom resources

Built with the Model Context Protocol SDK."""


async def read_info(uri: str) -> ResourceContents:
    return ResourceContents(contents=(ResourceContent(uri=uri, text=INFO_TEXT),))


info_resource = ResourceDefinition(
    uri=INFO_URI,
    name="Server Information",
    description="Information about this MCP server",
    mime_type="text/plain",
    handler=read_info,
)
