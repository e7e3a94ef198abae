"""Shared building blocks: error taxonomy and tool/resource definitions."""

from . import errors, tool_interface

__all__ = ["errors", "tool_interface"]
