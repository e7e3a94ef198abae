"""
Tool and resource definition structures.

Tools and resources are static records built at import time: a name (or uri),
metadata for discovery, and an async handler. The registry and protocol
adapter only ever see these records, never the handler internals.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypedDict

from mcp import types


class ToolInputSchema(TypedDict, total=False):
    """JSON Schema for tool input discovery."""

    type: str
    properties: dict[str, Any]
    required: list[str]


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool call: text content, flagged as error or not.

    Use ``ToolResult.text(...)`` for success and ``ToolResult.error(...)``
    for a failure the client should see as ``isError: true``.
    """

    content: tuple[str, ...] = ()
    is_error: bool = False

    @classmethod
    def text(cls, *texts: str) -> "ToolResult":
        return cls(content=tuple(texts))

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=(f"Error: {message}",), is_error=True)

    def to_mcp(self) -> types.CallToolResult:
        """Convert to the SDK call-tool result."""
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=text) for text in self.content],
            isError=self.is_error,
        )


@dataclass(frozen=True)
class ResourceContent:
    """One text entry of a resource read."""

    uri: str
    text: str
    mime_type: str = "text/plain"


@dataclass(frozen=True)
class ResourceContents:
    """Contents returned by a resource handler."""

    contents: tuple[ResourceContent, ...] = ()

    def to_mcp(self) -> types.ReadResourceResult:
        """Convert to the SDK read-resource result."""
        return types.ReadResourceResult(
            contents=[
                types.TextResourceContents(uri=item.uri, mimeType=item.mime_type, text=item.text)
                for item in self.contents
            ]
        )


ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]
ResourceHandler = Callable[[str], Awaitable[ResourceContents]]


@dataclass(frozen=True)
class ToolDefinition:
    """A callable operation exposed over MCP."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: ToolInputSchema = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Tool name cannot be empty"
            raise ValueError(msg)

    def to_mcp(self) -> types.Tool:
        """Listing entry for tools/list."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=dict(self.input_schema),
        )


@dataclass(frozen=True)
class ResourceDefinition:
    """A readable, addressable item exposed over MCP."""

    uri: str
    name: str
    description: str
    mime_type: str
    handler: ResourceHandler

    def __post_init__(self) -> None:
        if not self.uri:
            msg = "Resource uri cannot be empty"
            raise ValueError(msg)

    def to_mcp(self) -> types.Resource:
        """Listing entry for resources/list."""
        return types.Resource(
            uri=self.uri,
            name=self.name,
            description=self.description,
            mimeType=self.mime_type,
        )
