"""Registry-backed MCP server implementation.

This module provides the MCP server wrapper that:
1. Builds the tool and resource registries from ordered definitions
2. Creates the SDK server with the configured name and version
3. Binds list-tools, call-tool, list-resources and read-resource to the SDK's
   request handlers
4. Dispatches tool calls and resource reads to the registered handlers

Architecture:
- Transport (stdio | Streamable HTTP) → SDK Server → MCPTemplateServer → handler
- JSON-RPC framing, initialize and capability negotiation stay in the SDK

Example:
    server = MCPTemplateServer(ServerInfo(), default_tools(), default_resources())
    await run_stdio(server)
"""

import logging
from collections.abc import Iterable
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError

from mcp_template.framework.errors import (
    ExecutionError,
    MCPError,
    ResourceNotFoundError,
    UnknownToolError,
    to_error_data,
    to_mcp_error,
)
from mcp_template.framework.tool_interface import ResourceDefinition, ToolDefinition, ToolResult
from mcp_template.server.config import ServerInfo
from mcp_template.server.registry import build_registries

logger = logging.getLogger(__name__)


class MCPTemplateServer:
    """MCP server backed by static tool and resource registries.

    Attributes:
        info: Name and version advertised to clients
        tools: Tool registry (name -> ToolDefinition)
        resources: Resource registry (uri -> ResourceDefinition)
        server: SDK server instance the transports connect to
    """

    def __init__(
        self,
        info: ServerInfo,
        tools: Iterable[ToolDefinition],
        resources: Iterable[ResourceDefinition],
    ) -> None:
        """Initialize the server.

        Args:
            info: Server name and version
            tools: Tool definitions in declaration order
            resources: Resource definitions in declaration order
        """
        self.info = info
        self.tools, self.resources = build_registries(tools, resources)

        self.server: Server = Server(info.name, version=info.version)
        logger.info("Created MCP server: %s v%s", info.name, info.version)

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Bind the four request categories to the SDK server."""
        handlers = self.server.request_handlers
        handlers[types.ListToolsRequest] = self._handle_list_tools
        handlers[types.CallToolRequest] = self._handle_call_tool
        handlers[types.ListResourcesRequest] = self._handle_list_resources
        handlers[types.ReadResourceRequest] = self._handle_read_resource

    # ------------------------------------------------------------------
    # SDK request handlers
    # ------------------------------------------------------------------

    async def _handle_list_tools(self, request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=await self.list_tools()))

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(result)

    async def _handle_list_resources(
        self, request: types.ListResourcesRequest
    ) -> types.ServerResult:
        return types.ServerResult(types.ListResourcesResult(resources=await self.list_resources()))

    async def _handle_read_resource(self, request: types.ReadResourceRequest) -> types.ServerResult:
        try:
            result = await self.read_resource(str(request.params.uri))
        except Exception as e:
            error = to_mcp_error(e)
            if not isinstance(e, MCPError):
                logger.exception(
                    "Resource read failed: %s", error.message, extra={"error": error.to_dict()}
                )
            raise McpError(to_error_data(error)) from e
        return types.ServerResult(result)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_tools(self) -> list[types.Tool]:
        """Every registered tool, in declaration order."""
        return [tool.to_mcp() for tool in self.tools]

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> types.CallToolResult:
        """Invoke a tool by name.

        Unknown tools and handler failures come back as ``isError: true``
        results; nothing is raised to the protocol layer.

        Args:
            name: Tool name
            arguments: Tool arguments (None is treated as empty)

        Returns:
            SDK call-tool result
        """
        logger.info("Tool call: %s", name, extra={"tool": name})

        try:
            tool = self.tools.get(name)
            if tool is None:
                raise UnknownToolError(name)

            result = await tool.handler(arguments or {})
        except MCPError as e:
            logger.warning(
                "Tool '%s' failed: %s", name, e.message, extra={"tool": name, "error": e.to_dict()}
            )
            result = ToolResult.error(e.message)
        except Exception as e:
            error = ExecutionError(name, e)
            logger.exception("%s", error.message, extra={"tool": name, "error": error.to_dict()})
            # Clients see the handler's own message
            result = ToolResult.error(str(e))

        return result.to_mcp()

    async def list_resources(self) -> list[types.Resource]:
        """Every registered resource, in declaration order."""
        return [resource.to_mcp() for resource in self.resources]

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        """Read a resource by uri.

        Raises:
            ResourceNotFoundError: If no resource is registered under ``uri``
        """
        logger.info("Resource read: %s", uri, extra={"resource": uri})

        resource = self._find_resource(uri)
        if resource is None:
            raise ResourceNotFoundError(uri)

        contents = await resource.handler(uri)
        return contents.to_mcp()

    def _find_resource(self, uri: str) -> ResourceDefinition | None:
        resource = self.resources.get(uri)
        if resource is None and uri.endswith("/"):
            # URL normalization may append a slash to an empty path
            resource = self.resources.get(uri.rstrip("/"))
        return resource

    def create_initialization_options(self) -> InitializationOptions:
        """Initialization options for ``Server.run``."""
        return self.server.create_initialization_options()


__all__ = ["MCPTemplateServer"]
