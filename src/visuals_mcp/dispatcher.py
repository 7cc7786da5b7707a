"""Routes tool invocations to their handlers and shapes the responses."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from . import query as query_engine
from .errors import PreconditionError, UnknownToolError
from .export import export_rows
from .images import ImageSourceResolver
from .models import Query, SortKey, TableDataset
from .store import DatasetStore
from .tools import ToolRegistry, default_registry
from .validation import validate

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable["ToolResponse"]]


@dataclass
class ToolResponse:
    """A successful invocation: summary text for the model, data for the UI."""

    text: str
    data: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "_meta": {"ui": {"data": self.data}},
        }


# =============================================================================
# Formatting
# =============================================================================


def _title_suffix(args: dict[str, Any]) -> str:
    title = args.get("title")
    return f" Title: {title}" if title else ""


def count_tree_nodes(nodes: list[dict[str, Any]]) -> int:
    return sum(1 + count_tree_nodes(node.get("children", [])) for node in nodes)


def tree_outline(nodes: list[dict[str, Any]], prefix: str = "") -> str:
    """Render tree nodes as a box-drawing outline, one node per line."""
    lines: list[str] = []
    for index, node in enumerate(nodes):
        last = index == len(nodes) - 1
        connector = "└── " if last else "├── "
        icon = f"{node['icon']} " if node.get("icon") else ""
        metadata = node.get("metadata")
        details = ""
        if metadata:
            pairs = (f"{k}: {query_engine.js_string(v)}" for k, v in metadata.items())
            details = " (" + ", ".join(pairs) + ")"
        lines.append(f"{prefix}{connector}{icon}{node['label']}{details}")
        children = node.get("children")
        if children:
            lines.append(tree_outline(children, prefix + ("    " if last else "│   ")))
    return "\n".join(lines)


def _image_label(image: dict[str, Any]) -> str:
    label = image.get("title") or image.get("filename") or image.get("alt") or "image"
    width, height = image.get("width"), image.get("height")
    if width and height:
        label += f" ({width:g}x{height:g})"
    return label


# =============================================================================
# Dispatcher
# =============================================================================


class ToolDispatcher:
    """Validates invocations, owns the dataset store, and runs queries.

    Invocations are serialized with a lock, so a query never observes a
    table from a display call that has not finished.
    """

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        store: DatasetStore | None = None,
        images: ImageSourceResolver | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.store = store if store is not None else DatasetStore()
        self.images = images or ImageSourceResolver()
        self._lock = asyncio.Lock()
        self._handlers: dict[str, Handler] = {
            "display_table": self._display_table,
            "query_table_data": self._query_table_data,
            "export_table_data": self._export_table_data,
            "display_image": self._display_image,
            "display_tree": self._display_tree,
            "display_list": self._display_list,
            "display_chart": self._display_chart,
            "display_master_detail": self._display_master_detail,
        }
        missing = [t.name for t in self.registry.list() if t.name not in self._handlers]
        if missing:
            raise ValueError(f"No handler for tools: {', '.join(missing)}")

    async def dispatch(self, name: str, arguments: Any) -> ToolResponse:
        """Run tool ``name`` with raw client ``arguments``.

        Raises:
            UnknownToolError: If ``name`` is not registered.
            ValidationError: If the arguments do not match the tool's shape.
            PreconditionError: If a query-type tool runs before display_table.
            ImageSourceError: If an image source cannot be normalized.
        """
        definition = self.registry.get(name)
        if definition is None:
            raise UnknownToolError(name)

        args = validate(definition.shape, arguments)
        async with self._lock:
            return await self._handlers[name](args)

    def _require_dataset(self) -> TableDataset:
        dataset = self.store.get()
        if dataset is None:
            raise PreconditionError(query_engine.NO_DATASET_MESSAGE)
        return dataset

    # -------------------------------------------------------------------------
    # Table
    # -------------------------------------------------------------------------

    async def _display_table(self, args: dict[str, Any]) -> ToolResponse:
        dataset = TableDataset.from_arguments(args)
        self.store.put(dataset)
        logger.info(
            f"Stored table: {len(dataset.rows)} rows, {len(dataset.columns)} columns"
        )
        return ToolResponse(
            text=(
                f"Displaying table with {len(dataset.rows)} rows and "
                f"{len(dataset.columns)} columns.{_title_suffix(args)}"
            ),
            data=dataset.to_payload(),
        )

    async def _query_table_data(self, args: dict[str, Any]) -> ToolResponse:
        result = query_engine.run(self.store.get(), Query.from_arguments(args))
        logger.debug(
            "Query returned %d of %d rows (page %d)",
            len(result.rows),
            result.total_rows,
            result.page,
        )
        return ToolResponse(
            text=f"Returned {len(result.rows)} rows (page {result.page + 1})",
            data=result.to_payload(),
        )

    async def _export_table_data(self, args: dict[str, Any]) -> ToolResponse:
        dataset = self._require_dataset()
        query = Query(
            sort_by=[
                SortKey(column_key=item["columnKey"], direction=item["direction"])
                for item in args.get("sortBy", [])
            ],
            filters=dict(args.get("filters", {})),
        )
        rows = query_engine.ordered_rows(dataset, query)
        fmt = args["format"]
        content = export_rows(dataset, rows, fmt, args.get("columns"))
        return ToolResponse(
            text=f"Exported {len(rows)} rows as {fmt.upper()}:\n\n{content}",
            data={"format": fmt, "content": content, "rowCount": len(rows)},
        )

    # -------------------------------------------------------------------------
    # Other views
    # -------------------------------------------------------------------------

    async def _display_image(self, args: dict[str, Any]) -> ToolResponse:
        image = await self.images.resolve(args)
        return ToolResponse(text=f"Displaying image: {_image_label(image)}", data=image)

    async def _display_tree(self, args: dict[str, Any]) -> ToolResponse:
        nodes = args["nodes"]
        text = f"Displaying tree with {count_tree_nodes(nodes)} nodes.{_title_suffix(args)}"
        if nodes:
            text += "\n\n" + tree_outline(nodes)
        return ToolResponse(text=text, data=args)

    async def _display_list(self, args: dict[str, Any]) -> ToolResponse:
        items = args["items"]
        checked = sum(1 for item in items if item["checked"])
        return ToolResponse(
            text=(
                f"Displaying list with {len(items)} items ({checked} checked)."
                f"{_title_suffix(args)}"
            ),
            data=args,
        )

    async def _display_chart(self, args: dict[str, Any]) -> ToolResponse:
        charts = args["charts"]
        kinds = ", ".join(chart["type"] for chart in charts)
        text = f"Displaying {len(charts)} charts"
        if kinds:
            text += f" ({kinds})"
        return ToolResponse(text=f"{text}.{_title_suffix(args)}", data=args)

    async def _display_master_detail(self, args: dict[str, Any]) -> ToolResponse:
        items = args["masterItems"]
        item_ids = {item["id"] for item in items}

        details: dict[str, Any] = {}
        for item_id, detail in args["detailContents"].items():
            if item_id not in item_ids:
                logger.warning(f"Detail content for unknown master item: {item_id}")
            kind = detail["type"]
            if kind == "table":
                table = TableDataset.from_arguments(
                    detail["data"], path=f"detailContents.{item_id}.data"
                )
                detail = {"type": kind, "data": table.to_payload()}
            elif kind == "image":
                detail = {"type": kind, "data": await self.images.resolve(detail["data"])}
            details[item_id] = detail

        default_id = args.get("defaultSelectedId")
        if default_id is not None and default_id not in item_ids:
            logger.warning(f"defaultSelectedId {default_id!r} matches no master item")

        data = dict(args)
        data["detailContents"] = details
        return ToolResponse(
            text=(
                f"Displaying master-detail view with {len(items)} items."
                f"{_title_suffix(args)}"
            ),
            data=data,
        )
