"""Tool definitions and the registry that lists them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from mcp import types

from . import schemas
from .validation import Shape

VISIBILITIES = ("model", "app")


@dataclass(frozen=True)
class ToolDefinition:
    """A tool the client can invoke.

    ``kind`` is ``"display"`` for tools that hand new data to a renderer and
    ``"query"`` for tools that read back the stored table.
    """

    name: str
    description: str
    shape: Shape
    kind: str = "display"
    resource_uri: str | None = None
    visibility: tuple[str, ...] = VISIBILITIES

    def __post_init__(self) -> None:
        if self.kind not in ("display", "query"):
            raise ValueError(f"Tool {self.name}: unknown kind {self.kind!r}")
        if not self.visibility or any(v not in VISIBILITIES for v in self.visibility):
            raise ValueError(f"Tool {self.name}: bad visibility {self.visibility!r}")

    def ui_meta(self) -> dict[str, Any]:
        ui: dict[str, Any] = {}
        if self.resource_uri:
            ui["resourceUri"] = self.resource_uri
        ui["visibility"] = list(self.visibility)
        return ui

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.shape.to_json_schema(),
            "_meta": {"ui": self.ui_meta()},
        }

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool.model_validate(self.to_dict())


class ToolRegistry:
    """Read-only catalog of tools, in registration order."""

    def __init__(self, definitions: Iterable[ToolDefinition]) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for definition in definitions:
            if definition.name in self._tools:
                raise ValueError(f"Duplicate tool name: {definition.name}")
            self._tools[definition.name] = definition

    def list(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


# -----------------------------------------------------------------------------
# Tool Definitions
# -----------------------------------------------------------------------------

TOOLS = [
    ToolDefinition(
        name="display_table",
        description=(
            "Display an interactive table with sorting, filtering, pagination, "
            "column visibility, and row selection. Accepts column definitions and "
            "row data. Returns a visual table component that users can interact with."
        ),
        shape=schemas.TABLE_INPUT,
        resource_uri="table://display",
    ),
    ToolDefinition(
        name="query_table_data",
        description=(
            "Query table data with server-side sorting and filtering. "
            "UI-only tool for performance with large datasets."
        ),
        shape=schemas.QUERY_INPUT,
        kind="query",
        visibility=("app",),
    ),
    ToolDefinition(
        name="export_table_data",
        description="""Export the most recently displayed table as CSV, TSV, or JSON text.

Applies the given filters and sort order to all rows (no pagination).
Use columns to pick and order the exported columns.""",
        shape=schemas.EXPORT_INPUT,
        kind="query",
    ),
    ToolDefinition(
        name="display_image",
        description=(
            "Display an image preview with optional title, caption, and file details. "
            "Accepts a URL, data URI, or local file path; local files are inlined."
        ),
        shape=schemas.IMAGE_INPUT,
        resource_uri="image://display",
    ),
    ToolDefinition(
        name="display_tree",
        description=(
            "Display a collapsible tree of nodes, such as a file system or an "
            "organization chart. Nodes can carry icons and metadata."
        ),
        shape=schemas.TREE_INPUT,
        resource_uri="tree://display",
    ),
    ToolDefinition(
        name="display_list",
        description=(
            "Display a list of items with optional checkboxes, drag-to-reorder, "
            "thumbnails, and secondary text."
        ),
        shape=schemas.LIST_INPUT,
        resource_uri="list://display",
    ),
    ToolDefinition(
        name="display_chart",
        description=(
            "Display one or more charts (line, bar, area, pie, scatter, composed) "
            "with legends, tooltips, and a vertical, horizontal, or grid layout."
        ),
        shape=schemas.CHART_INPUT,
        resource_uri="chart://display",
    ),
    ToolDefinition(
        name="display_master_detail",
        description=(
            "Display a master list of items next to a detail panel. Each item's "
            "detail is a table, an image, or text/HTML content."
        ),
        shape=schemas.MASTER_DETAIL_INPUT,
        resource_uri="master-detail://display",
    ),
]


def default_registry() -> ToolRegistry:
    return ToolRegistry(TOOLS)
