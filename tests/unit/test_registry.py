"""Unit tests for the ToolRegistry and catalog merging."""

from unittest.mock import AsyncMock

import pytest

from toolsmith_server.tools import Tool, ToolProvenance
from toolsmith_server.tools.registry import ToolCatalog, ToolRegistry, merge


def discovered(name: str, description: str = "discovered") -> Tool:
    return Tool(
        name=name,
        description=description,
        input_schema={"type": "object", "properties": {"x": {"type": "string"}}},
        category="records",
        provenance=ToolProvenance(source_kind="record", resource="x", operation="get"),
    )


def test_catalog_rejects_duplicate_names():
    """Test that names are unique within a catalog."""
    catalog = ToolCatalog()

    assert catalog.add(Tool(name="a", description="first")) is True
    assert catalog.add(Tool(name="a", description="second")) is False
    assert len(catalog) == 1
    assert catalog.get("a").description == "first"


def test_merge_static_wins_on_collision():
    """Test that a static tool shadows a same-named discovered tool."""
    static = [Tool(name="get_account", description="static version", category="system")]
    found = [discovered("get_account"), discovered("list_account")]

    catalog = merge(static, found)

    assert catalog.names() == ["get_account", "list_account"]
    tool = catalog.get("get_account")
    assert tool.description == "static version"
    assert tool.input_schema == {"type": "object", "properties": {}}
    assert not tool.is_discovered


def test_minimal_and_full_shapes():
    """Test the two listing shapes."""
    tool = discovered("get_x")

    assert set(tool.to_minimal()) == {"name", "description", "inputSchema"}
    full = tool.to_full()
    assert full["category"] == "records"
    assert full["provenance"]["source_kind"] == "record"
    assert full["inputSchema"] == tool.input_schema


def test_tool_round_trips_through_snapshot_dict():
    """Test that snapshot serialization restores an equal tool."""
    tool = discovered("get_x")

    assert Tool.from_dict(tool.to_dict()) == tool


@pytest.mark.asyncio
async def test_registry_lists_static_then_discovered():
    """Test that list() merges static tools with cached tools."""
    cache = AsyncMock()
    cache.get_tools.return_value = [discovered("create_widget"), discovered("whoami")]
    registry = ToolRegistry([Tool(name="whoami", description="static")], cache)

    minimal = await registry.list()
    full = await registry.list(full=True)

    assert [t["name"] for t in minimal] == ["whoami", "create_widget"]
    assert minimal[0]["description"] == "static"
    assert "keywords" in full[0]
