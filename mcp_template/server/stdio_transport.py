"""
stdio transport for MCP.

One unkeyed transport for the life of the process: the client that spawned
us talks JSON-RPC over our stdin/stdout. Logs must stay on stderr.
"""

import logging

from mcp.server.stdio import stdio_server

from mcp_template.server.mcp_server import MCPTemplateServer

logger = logging.getLogger(__name__)


async def run_stdio(server: MCPTemplateServer) -> None:
    """Serve ``server`` over stdin/stdout until the client closes the stream."""
    async with stdio_server() as (read, write):
        logger.info("%s running on stdio", server.info.name, extra={"transport": "stdio"})
        await server.server.run(read, write, server.create_initialization_options())
