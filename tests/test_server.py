"""Tests for the MCP handlers wired up in the server module."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest  # type: ignore[import-not-found]
from mcp import types
from mcp.shared.exceptions import McpError

from visuals_mcp import server as server_module
from visuals_mcp.dispatcher import ToolDispatcher
from visuals_mcp.resources import RESOURCES, ResourceCatalog

TABLE_ARGS: dict[str, Any] = {
    "columns": [{"key": "id", "label": "ID"}],
    "rows": [{"id": i} for i in range(5)],
    "pageSize": 2,
}


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setattr(server_module, "dispatcher", ToolDispatcher())
    monkeypatch.setattr(server_module, "catalog", ResourceCatalog(RESOURCES, tmp_path))
    return tmp_path


def _dump(result: Any) -> dict[str, Any]:
    return result.model_dump(by_alias=True, exclude_none=True)


class TestCallTool:
    def test_display_table(self) -> None:
        result = asyncio.run(server_module.call_tool("display_table", TABLE_ARGS))
        assert not result.isError
        assert result.content[0].text == "Displaying table with 5 rows and 1 columns."
        assert _dump(result)["_meta"]["ui"]["data"]["pageSize"] == 2

    def test_query_after_display(self) -> None:
        asyncio.run(server_module.call_tool("display_table", TABLE_ARGS))
        result = asyncio.run(server_module.call_tool("query_table_data", {"page": 2}))
        data = _dump(result)["_meta"]["ui"]["data"]
        assert data["rows"] == [{"id": 4}]
        assert data["totalRows"] == 5

    def test_query_before_display_is_error(self) -> None:
        result = asyncio.run(server_module.call_tool("query_table_data", None))
        assert result.isError
        assert "No table data available" in result.content[0].text

    def test_unknown_tool_is_error(self) -> None:
        result = asyncio.run(server_module.call_tool("nonexistent_tool", {}))
        assert result.isError
        assert result.content[0].text == "Error: Unknown tool: nonexistent_tool"

    def test_validation_error_is_error(self) -> None:
        result = asyncio.run(server_module.call_tool("display_table", {"rows": []}))
        assert result.isError
        assert "columns: required field missing" in result.content[0].text


class TestListings:
    def test_list_tools(self) -> None:
        tools = asyncio.run(server_module.list_tools())
        assert len(tools) == 8
        assert tools[0].name == "display_table"

    def test_list_resources(self) -> None:
        resources = asyncio.run(server_module.list_resources())
        assert len(resources) == 6


class TestReadResource:
    def test_read(self, fresh_state: Path) -> None:
        (fresh_state / "list.html").write_text("<html>list</html>", encoding="utf-8")
        contents = asyncio.run(server_module.read_resource("list://display"))
        assert contents[0].content == "<html>list</html>"
        assert contents[0].mime_type == "text/html"

    def test_unknown_uri(self) -> None:
        with pytest.raises(McpError, match="Unknown resource") as exc_info:
            asyncio.run(server_module.read_resource("nope://x"))
        assert exc_info.value.error.code == types.INVALID_PARAMS

    def test_missing_bundle(self) -> None:
        with pytest.raises(McpError, match="Failed to read resource") as exc_info:
            asyncio.run(server_module.read_resource("table://display"))
        assert exc_info.value.error.code == types.INTERNAL_ERROR
