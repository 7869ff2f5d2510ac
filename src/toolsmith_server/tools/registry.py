"""Tool registry: merges static and discovered tools into one catalog."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from toolsmith_server.discovery.cache import ToolCache
from toolsmith_server.tools.types import Tool

logger = logging.getLogger(__name__)


class ToolCatalog:
    """Tools keyed by name, in insertion order."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.add(tool)

    def add(self, tool: Tool) -> bool:
        """Add a tool unless its name is already taken.

        Returns:
            bool: True if the tool was added
        """
        if tool.name in self._tools:
            return False
        self._tools[tool.name] = tool
        return True

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)


def merge(static: Iterable[Tool], discovered: Iterable[Tool]) -> ToolCatalog:
    """Merge tool lists; a static tool always wins over a same-named discovered one."""
    catalog = ToolCatalog(static)
    shadowed = [tool.name for tool in discovered if not catalog.add(tool)]
    if shadowed:
        logger.debug(f"Discovered tools shadowed by static tools: {shadowed}")
    return catalog


class ToolRegistry:
    """Serves the merged catalog of static and cached discovered tools."""

    def __init__(self, static_tools: list[Tool], cache: ToolCache) -> None:
        self.static_tools = static_tools
        self.cache = cache

    async def catalog(self) -> ToolCatalog:
        discovered = await self.cache.get_tools()
        return merge(self.static_tools, discovered)

    async def list(self, full: bool = False) -> list[dict[str, Any]]:
        """List every tool in the minimal invocation shape or the full search shape."""
        catalog = await self.catalog()
        if full:
            return [tool.to_full() for tool in catalog]
        return [tool.to_minimal() for tool in catalog]
