"""
Registries for tools (by name) and resources (by uri).

Built once when the server is constructed and read-only afterwards.

Usage:
    tools, resources = build_registries(default_tools(), default_resources())
    tool = tools.get("echo")
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from mcp_template.framework.tool_interface import ResourceDefinition, ToolDefinition

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Registry(Generic[T]):
    """Keyed, insertion-ordered, read-only mapping of definitions."""

    kind = "entry"

    def __init__(self, entries: Iterable[tuple[str, T]]) -> None:
        self._entries: dict[str, T] = {}
        for key, definition in entries:
            if key in self._entries:
                # Later declaration wins; listing keeps the first position
                logger.warning("Duplicate %s '%s': later definition replaces earlier", self.kind, key)
            self._entries[key] = definition

    def get(self, key: str) -> T | None:
        return self._entries.get(key)

    def list_all(self) -> list[T]:
        return list(self._entries.values())

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries.values())


class ToolRegistry(_Registry[ToolDefinition]):
    """name -> ToolDefinition."""

    kind = "tool"

    def __init__(self, tools: Iterable[ToolDefinition]) -> None:
        super().__init__((tool.name, tool) for tool in tools)

    def names(self) -> list[str]:
        return self.keys()


class ResourceRegistry(_Registry[ResourceDefinition]):
    """uri -> ResourceDefinition."""

    kind = "resource"

    def __init__(self, resources: Iterable[ResourceDefinition]) -> None:
        super().__init__((resource.uri, resource) for resource in resources)

    def uris(self) -> list[str]:
        return self.keys()


def build_registries(
    tools: Iterable[ToolDefinition],
    resources: Iterable[ResourceDefinition],
) -> tuple[ToolRegistry, ResourceRegistry]:
    """Build the tool and resource registries from ordered definitions."""
    tool_registry = ToolRegistry(tools)
    resource_registry = ResourceRegistry(resources)
    logger.info(
        "Registered %s tools %s and %s resources %s",
        len(tool_registry),
        tool_registry.names(),
        len(resource_registry),
        resource_registry.uris(),
    )
    return tool_registry, resource_registry
