"""MCP Server Core - Protocol Adapter and Transports.

This package contains:
- mcp_server.py: SDK adapter dispatching to the registries
- registry.py: Tool and resource registries
- schemas.py: Tool argument models
- sessions.py: Session table and router for the HTTP transport
- http_transport.py: Streamable HTTP binding (Starlette + uvicorn)
- stdio_transport.py: stdio binding
- config.py: Server configuration and command-line parsing
"""

from .mcp_server import MCPTemplateServer

__all__ = ["MCPTemplateServer"]
