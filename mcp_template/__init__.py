"""
MCP Template: a minimal Model Context Protocol server.

Exposes two tools (``get_time``, ``echo``) and one resource (``mcp://info``)
over stdio or Streamable HTTP.

Public modules:
- mcp_template.server: SDK adapter, registries, transports and config
- mcp_template.tools / mcp_template.resources: built-in definitions
- mcp_template.framework: error taxonomy and definition types
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mcp-template")
except PackageNotFoundError:
    # Development checkout, not installed via pip
    __version__ = "1.0.0"

__all__ = ["__version__"]
