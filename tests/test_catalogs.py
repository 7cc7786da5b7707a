"""Tests for the tool registry and the resource catalog."""

from __future__ import annotations

from pathlib import Path

import pytest  # type: ignore[import-not-found]

from visuals_mcp.errors import ResourceReadError, UnknownResourceError
from visuals_mcp.resources import RESOURCES, ResourceCatalog, ResourceDescriptor
from visuals_mcp.tools import TOOLS, ToolDefinition, ToolRegistry, default_registry
from visuals_mcp.validation import Shape


class TestToolRegistry:
    def test_lists_in_registration_order(self) -> None:
        names = [tool.name for tool in default_registry().list()]
        assert names == [
            "display_table",
            "query_table_data",
            "export_table_data",
            "display_image",
            "display_tree",
            "display_list",
            "display_chart",
            "display_master_detail",
        ]

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate tool name: display_table"):
            ToolRegistry([TOOLS[0], TOOLS[0]])

    def test_get_and_contains(self) -> None:
        registry = default_registry()
        assert registry.get("display_table") is TOOLS[0]
        assert registry.get("nope") is None
        assert "query_table_data" in registry
        assert "nope" not in registry

    def test_bad_visibility(self) -> None:
        with pytest.raises(ValueError):
            ToolDefinition(name="x", description="", shape=Shape(), visibility=("user",))
        with pytest.raises(ValueError):
            ToolDefinition(name="x", description="", shape=Shape(), visibility=())

    def test_bad_kind(self) -> None:
        with pytest.raises(ValueError):
            ToolDefinition(name="x", description="", shape=Shape(), kind="mutate")

    def test_display_table_listing(self) -> None:
        entry = default_registry().get("display_table")
        assert entry is not None
        listing = entry.to_dict()
        assert listing["_meta"] == {
            "ui": {"resourceUri": "table://display", "visibility": ["model", "app"]}
        }
        assert listing["inputSchema"]["required"] == ["columns", "rows"]

    def test_query_tool_is_app_only(self) -> None:
        entry = default_registry().get("query_table_data")
        assert entry is not None
        assert entry.kind == "query"
        assert entry.to_dict()["_meta"] == {"ui": {"visibility": ["app"]}}

    def test_every_display_tool_has_a_resource(self) -> None:
        uris = {descriptor.uri for descriptor in RESOURCES}
        for tool in TOOLS:
            if tool.kind == "display":
                assert tool.resource_uri in uris

    def test_to_mcp_tool(self) -> None:
        tool = TOOLS[0].to_mcp_tool()
        assert tool.name == "display_table"
        assert tool.inputSchema["type"] == "object"
        dumped = tool.model_dump(by_alias=True, exclude_none=True)
        assert dumped["_meta"]["ui"]["resourceUri"] == "table://display"


class TestResourceCatalog:
    def _catalog(self, ui_dir: Path) -> ResourceCatalog:
        return ResourceCatalog(RESOURCES, ui_dir)

    def test_list(self, tmp_path: Path) -> None:
        uris = [d.uri for d in self._catalog(tmp_path).list()]
        assert uris[0] == "table://display"
        assert len(uris) == 6

    def test_describe(self, tmp_path: Path) -> None:
        catalog = self._catalog(tmp_path)
        descriptor = catalog.describe("tree://display")
        assert descriptor is not None
        assert descriptor.mime_type == "text/html"
        assert catalog.describe("nope://x") is None

    def test_read(self, tmp_path: Path) -> None:
        (tmp_path / "table.html").write_text("<html>table</html>", encoding="utf-8")
        assert self._catalog(tmp_path).read("table://display") == "<html>table</html>"

    def test_read_unknown(self, tmp_path: Path) -> None:
        with pytest.raises(UnknownResourceError, match="Unknown resource: nope://x"):
            self._catalog(tmp_path).read("nope://x")

    def test_read_missing_bundle(self, tmp_path: Path) -> None:
        with pytest.raises(ResourceReadError, match="renderer bundles are built"):
            self._catalog(tmp_path).read("chart://display")

    def test_duplicate_uri_rejected(self, tmp_path: Path) -> None:
        descriptor = ResourceDescriptor(
            uri="a://b", name="A", description="", filename="a.html"
        )
        with pytest.raises(ValueError, match="Duplicate resource uri"):
            ResourceCatalog([descriptor, descriptor], tmp_path)

    def test_to_mcp_resource(self) -> None:
        resource = RESOURCES[0].to_mcp_resource()
        assert str(resource.uri).startswith("table://display")
        assert resource.mimeType == "text/html"
        assert resource.name == "Interactive Table Display"
