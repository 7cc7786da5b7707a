"""Text exports of the stored table (CSV, TSV, JSON)."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from .errors import ValidationError
from .models import Column, Row, TableDataset
from .query import js_string

EXPORT_FORMATS = ("csv", "tsv", "json")


def select_columns(dataset: TableDataset, keys: list[str] | None) -> list[Column]:
    """Resolve an ordered subset of column keys; ``None`` means all columns."""
    if keys is None:
        return list(dataset.columns)
    columns: list[Column] = []
    for index, key in enumerate(keys):
        column = dataset.column(key)
        if column is None:
            raise ValidationError(f"columns[{index}]", f"unknown column key {key!r}")
        columns.append(column)
    return columns


def _cell(row: Row, key: str) -> str:
    value = row.get(key)
    return "" if value is None else js_string(value)


def to_csv(columns: list[Column], rows: list[Row]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([column.label for column in columns])
    for row in rows:
        writer.writerow([_cell(row, column.key) for column in columns])
    return buffer.getvalue().rstrip("\n")


def to_tsv(columns: list[Column], rows: list[Row]) -> str:
    lines = ["\t".join(column.label for column in columns)]
    for row in rows:
        lines.append(
            "\t".join(_cell(row, column.key).replace("\t", " ") for column in columns)
        )
    return "\n".join(lines)


def to_json(columns: list[Column], rows: list[Row]) -> str:
    records: list[dict[str, Any]] = [
        {column.key: row.get(column.key) for column in columns} for row in rows
    ]
    return json.dumps(records, indent=2, ensure_ascii=False, default=str)


def export_rows(
    dataset: TableDataset,
    rows: list[Row],
    fmt: str = "csv",
    column_keys: list[str] | None = None,
) -> str:
    """Render ``rows`` of ``dataset`` in the requested text format."""
    columns = select_columns(dataset, column_keys)
    if fmt == "csv":
        return to_csv(columns, rows)
    if fmt == "tsv":
        return to_tsv(columns, rows)
    if fmt == "json":
        return to_json(columns, rows)
    raise ValueError(f"Unsupported export format: {fmt}")
