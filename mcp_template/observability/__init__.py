"""
Lightweight observability utilities for the MCP server.

Exports the logging setup used by the CLI entry point.
"""

from .logging import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
