"""Table dataset and query types shared by the dispatcher and query engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError

Row = dict[str, Any]

COLUMN_TYPES = ("string", "number", "date", "boolean")
SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class Column:
    """A table column definition."""

    key: str
    label: str
    type: str = "string"
    sortable: bool = True
    filterable: bool = True
    width: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Column:
        return cls(
            key=data["key"],
            label=data["label"],
            type=data.get("type", "string"),
            sortable=data.get("sortable", True),
            filterable=data.get("filterable", True),
            width=data.get("width"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "key": self.key,
            "label": self.label,
            "type": self.type,
            "sortable": self.sortable,
            "filterable": self.filterable,
        }
        if self.width is not None:
            result["width"] = self.width
        return result


@dataclass
class TableDataset:
    """The data behind one ``display_table`` invocation."""

    columns: list[Column]
    rows: list[Row]
    title: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    allow_row_selection: bool = True
    allow_column_visibility: bool = True

    @classmethod
    def from_arguments(cls, args: dict[str, Any], path: str = "") -> TableDataset:
        """Build a dataset from already validated ``display_table`` arguments.

        Raises:
            ValidationError: If two columns share a key.
        """
        columns: list[Column] = []
        seen: set[str] = set()
        for index, raw in enumerate(args["columns"]):
            column = Column.from_dict(raw)
            if column.key in seen:
                prefix = f"{path}.columns" if path else "columns"
                raise ValidationError(
                    f"{prefix}[{index}].key", f"duplicate column key {column.key!r}"
                )
            seen.add(column.key)
            columns.append(column)

        return cls(
            columns=columns,
            rows=[dict(row) for row in args["rows"]],
            title=args.get("title"),
            page_size=args.get("pageSize", DEFAULT_PAGE_SIZE),
            allow_row_selection=args.get("allowRowSelection", True),
            allow_column_visibility=args.get("allowColumnVisibility", True),
        )

    def column(self, key: str) -> Column | None:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "columns": [column.to_dict() for column in self.columns],
            "rows": [dict(row) for row in self.rows],
        }
        if self.title is not None:
            payload["title"] = self.title
        payload["allowRowSelection"] = self.allow_row_selection
        payload["allowColumnVisibility"] = self.allow_column_visibility
        payload["pageSize"] = self.page_size
        return payload


@dataclass(frozen=True)
class SortKey:
    column_key: str
    direction: str = "asc"


@dataclass
class Query:
    """Filters, sort keys and page window for a read of the stored table.

    ``page_size`` of ``None`` means "use the dataset's page size".
    """

    sort_by: list[SortKey] = field(default_factory=list)
    filters: dict[str, str] = field(default_factory=dict)
    page: int = 0
    page_size: int | None = None

    @classmethod
    def from_arguments(cls, args: dict[str, Any]) -> Query:
        return cls(
            sort_by=[
                SortKey(column_key=item["columnKey"], direction=item["direction"])
                for item in args.get("sortBy", [])
            ],
            filters=dict(args.get("filters", {})),
            page=args.get("page", 0),
            page_size=args.get("pageSize"),
        )


@dataclass
class QueryResult:
    rows: list[Row]
    total_rows: int
    page: int
    page_size: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "totalRows": self.total_rows,
            "page": self.page,
            "pageSize": self.page_size,
        }
