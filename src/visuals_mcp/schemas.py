"""Input shapes for every tool the server exposes."""

from __future__ import annotations

from .export import EXPORT_FORMATS
from .models import COLUMN_TYPES, DEFAULT_PAGE_SIZE, SORT_DIRECTIONS
from .validation import Field, Shape

# -----------------------------------------------------------------------------
# Table
# -----------------------------------------------------------------------------

COLUMN = Shape(
    name="Column",
    fields={
        "key": Field(
            "string",
            required=True,
            description="Unique key for the column (maps to data property)",
        ),
        "label": Field(
            "string", required=True, description="Display label for the column header"
        ),
        "type": Field("string", enum=COLUMN_TYPES, default="string"),
        "sortable": Field("boolean", default=True),
        "filterable": Field("boolean", default=True),
        "width": Field("number", description="Column width in pixels"),
    },
)

TABLE_INPUT = Shape(
    name="TableInput",
    fields={
        "columns": Field(
            "array",
            required=True,
            items=Field("object", shape=COLUMN),
            description="Array of column definitions",
        ),
        "rows": Field(
            "array",
            required=True,
            items=Field("object"),
            description="Array of row data objects",
        ),
        "title": Field("string", description="Optional title for the table"),
        "allowRowSelection": Field("boolean", default=True),
        "allowColumnVisibility": Field("boolean", default=True),
        "pageSize": Field(
            "integer", minimum=1, default=DEFAULT_PAGE_SIZE, description="Default page size"
        ),
    },
)

SORT_KEY = Shape(
    name="SortKey",
    fields={
        "columnKey": Field("string", required=True),
        "direction": Field("string", required=True, enum=SORT_DIRECTIONS),
    },
)

_SORT_BY = Field(
    "array",
    items=Field("object", shape=SORT_KEY),
    description="Sort keys, applied in order; later keys break ties",
)
_FILTERS = Field(
    "object",
    values=Field("string"),
    description="Map of column key to case-insensitive substring",
)

QUERY_INPUT = Shape(
    name="QueryInput",
    fields={
        "sortBy": _SORT_BY,
        "filters": _FILTERS,
        "page": Field("integer", minimum=0, description="Zero-based page index"),
        "pageSize": Field(
            "integer", minimum=1, description="Rows per page. Defaults to the table's"
        ),
    },
)

EXPORT_INPUT = Shape(
    name="ExportInput",
    fields={
        "format": Field("string", enum=EXPORT_FORMATS, default="csv"),
        "sortBy": _SORT_BY,
        "filters": _FILTERS,
        "columns": Field(
            "array",
            items=Field("string"),
            description="Column keys to include, in order. Defaults to all columns",
        ),
    },
)

# -----------------------------------------------------------------------------
# Image
# -----------------------------------------------------------------------------

IMAGE_INPUT = Shape(
    name="ImageInput",
    fields={
        "src": Field(
            "string",
            required=True,
            description="Image URL, data URI, file:// URI or local file path",
        ),
        "title": Field("string", description="Optional title for the image"),
        "alt": Field("string", description="Alt text for accessibility"),
        "caption": Field("string", description="Optional caption below the image"),
        "width": Field("number", description="Optional image width in pixels"),
        "height": Field("number", description="Optional image height in pixels"),
        "filename": Field("string", description="Optional filename to display"),
        "sizeBytes": Field("number", description="Optional file size in bytes"),
    },
)

# -----------------------------------------------------------------------------
# Tree
# -----------------------------------------------------------------------------

TREE_NODE = Shape(
    name="TreeNode",
    fields={
        "id": Field("string", required=True, description="Unique node identifier"),
        "label": Field("string", required=True, description="Display label"),
        "icon": Field("string", description="Optional icon or emoji"),
        "expanded": Field("boolean", description="Initially expanded"),
        "metadata": Field("object", description="Key/value details shown beside the label"),
    },
)
TREE_NODE.fields["children"] = Field(
    "array", items=Field("object", shape=TREE_NODE), description="Child nodes"
)

TREE_INPUT = Shape(
    name="TreeInput",
    fields={
        "title": Field("string", description="Optional title for the tree"),
        "nodes": Field(
            "array",
            required=True,
            items=Field("object", shape=TREE_NODE),
            description="Root nodes",
        ),
        "expandAll": Field("boolean", default=False),
        "showMetadata": Field("boolean", default=True),
    },
)

# -----------------------------------------------------------------------------
# List
# -----------------------------------------------------------------------------

LIST_ITEM = Shape(
    name="ListItem",
    fields={
        "id": Field("string", required=True, description="Unique item identifier"),
        "content": Field("string", required=True, description="Main item text"),
        "subtext": Field("string", description="Secondary text"),
        "checked": Field("boolean", default=False),
        "image": Field("string", description="Optional thumbnail URL or data URI"),
        "metadata": Field("object", description="Additional metadata"),
    },
)

LIST_INPUT = Shape(
    name="ListInput",
    fields={
        "title": Field("string", description="Optional title for the list"),
        "items": Field(
            "array",
            required=True,
            items=Field("object", shape=LIST_ITEM),
            description="Items to display",
        ),
        "allowReorder": Field("boolean", default=True),
        "allowCheckboxes": Field("boolean", default=True),
        "showImages": Field("boolean", default=True),
        "compact": Field("boolean", default=False),
    },
)

# -----------------------------------------------------------------------------
# Chart
# -----------------------------------------------------------------------------

CHART_TYPES = ("line", "bar", "area", "pie", "scatter", "composed")

CHART_SERIES = Shape(
    name="ChartSeries",
    fields={
        "dataKey": Field("string", required=True, description="Data property to plot"),
        "name": Field("string", description="Legend name"),
        "color": Field("string", description="CSS color"),
        "type": Field(
            "string",
            enum=("line", "bar", "area"),
            description="Series type inside a composed chart",
        ),
        "yAxisId": Field("string", enum=("left", "right")),
    },
)

CHART_CONFIG = Shape(
    name="ChartConfig",
    fields={
        "type": Field("string", required=True, enum=CHART_TYPES),
        "title": Field("string"),
        "data": Field(
            "array", required=True, items=Field("object"), description="Data points"
        ),
        "xAxisKey": Field("string", description="Data property for the x axis"),
        "dataKey": Field("string", description="Value property for pie charts"),
        "nameKey": Field("string", description="Name property for pie charts"),
        "series": Field("array", items=Field("object", shape=CHART_SERIES)),
        "width": Field("number"),
        "height": Field("number"),
        "showGrid": Field("boolean", default=True),
        "showLegend": Field("boolean", default=True),
        "showTooltip": Field("boolean", default=True),
        "stacked": Field("boolean", default=False),
    },
)

CHART_INPUT = Shape(
    name="ChartInput",
    fields={
        "title": Field("string", description="Optional title above all charts"),
        "charts": Field(
            "array",
            required=True,
            items=Field("object", shape=CHART_CONFIG),
            description="Charts to render",
        ),
        "layout": Field("string", enum=("vertical", "horizontal", "grid"), default="vertical"),
    },
)

# -----------------------------------------------------------------------------
# Master-detail
# -----------------------------------------------------------------------------

MASTER_ITEM = Shape(
    name="MasterItem",
    fields={
        "id": Field("string", required=True, description="Unique identifier for the item"),
        "label": Field("string", required=True, description="Display label for the item"),
        "description": Field("string", description="Optional description"),
        "icon": Field("string", description="Optional icon or emoji"),
        "metadata": Field("object", description="Additional metadata"),
    },
)

TEXT_DETAIL = Shape(
    name="TextDetail",
    fields={
        "content": Field("string", required=True, description="Text or HTML content"),
        "isHtml": Field("boolean", default=False),
    },
)

DETAIL_CONTENT = Field(
    "object",
    variants={
        "table": Shape(
            name="TableDetail",
            fields={
                "type": Field("string", required=True, enum=("table",)),
                "data": Field("object", required=True, shape=TABLE_INPUT),
            },
        ),
        "image": Shape(
            name="ImageDetail",
            fields={
                "type": Field("string", required=True, enum=("image",)),
                "data": Field("object", required=True, shape=IMAGE_INPUT),
            },
        ),
        "text": Shape(
            name="TextDetailContent",
            fields={
                "type": Field("string", required=True, enum=("text",)),
                "data": Field("object", required=True, shape=TEXT_DETAIL),
            },
        ),
    },
)

MASTER_DETAIL_INPUT = Shape(
    name="MasterDetailInput",
    fields={
        "title": Field("string", description="Optional title for the master-detail view"),
        "masterItems": Field(
            "array",
            required=True,
            items=Field("object", shape=MASTER_ITEM),
            description="Array of items to display in master list",
        ),
        "detailContents": Field(
            "object",
            required=True,
            values=DETAIL_CONTENT,
            description="Map of item IDs to their detail content. Keys should match masterItems IDs.",
        ),
        "defaultSelectedId": Field("string", description="ID of item to select by default"),
        "masterWidth": Field(
            "number", default=300, description="Width of master panel in pixels"
        ),
        "orientation": Field(
            "string",
            enum=("horizontal", "vertical"),
            default="horizontal",
            description="Layout orientation: horizontal (side-by-side) or vertical (stacked)",
        ),
    },
)
